"""
GET /report, GET /report.json
Runs a triage pass on demand and returns it as the HTML report or as JSON.
"""
import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse

from bugtriage.agents.bugzilla_client import BugzillaError
from bugtriage.agents.orchestrator import ReportOrchestrator
from bugtriage.core.config import MAX_CONCURRENCY, RunConfig
from bugtriage.models.result import ReportData
from bugtriage.services.report_writer import ReportWriter

logger = logging.getLogger(__name__)

router = APIRouter()


async def _build_report(concurrency: int) -> ReportData:
    orchestrator = ReportOrchestrator(config=RunConfig(concurrency=concurrency))
    try:
        return await orchestrator.run()
    except BugzillaError as e:
        logger.error("Report aborted: %s (%s)", e, e.url)
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/report", response_class=HTMLResponse)
async def get_report(concurrency: int = Query(MAX_CONCURRENCY, ge=1, le=100)):
    data = await _build_report(concurrency)
    return HTMLResponse(ReportWriter().render_html(data))


@router.get("/report.json", response_model=ReportData)
async def get_report_json(concurrency: int = Query(MAX_CONCURRENCY, ge=1, le=100)):
    return await _build_report(concurrency)
