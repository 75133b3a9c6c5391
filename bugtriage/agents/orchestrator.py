"""
Report Orchestrator
===================
Runs one triage pass end to end:

    1. List intermittent bugs               (fatal on failure)
    2. Aggregate their comment breakdowns   (per-bug failures absorbed)
    3. List perma bugs                      (fatal on failure)
    4. Package everything as ReportData
"""
import time
import logging
from datetime import timezone
from typing import Optional

from bugtriage.agents.aggregator import FailureAggregator
from bugtriage.agents.bugzilla_client import BugzillaClient
from bugtriage.agents.perma_lister import list_perma_bugs
from bugtriage.core.config import RunConfig
from bugtriage.models.result import ReportData
from bugtriage.parser.breakdown_parser import SectionExtractor

logger = logging.getLogger(__name__)


class ReportOrchestrator:

    def __init__(
        self,
        config: Optional[RunConfig] = None,
        client: Optional[BugzillaClient] = None,
        extractor: Optional[SectionExtractor] = None,
    ) -> None:
        self.config = config or RunConfig()
        self.client = client or BugzillaClient()
        self.extractor = extractor

    async def run(self) -> ReportData:
        """Build the report data. Raises BugzillaError if a listing fails."""
        start_time = time.time()
        # Pin "now" so cutoff, graph windows and the perma query agree
        config = self.config.model_copy(update={"now": self.config.reference_time()})
        now = config.reference_time()

        async with self.client as client:
            logger.info("Fetching intermittent bugs")
            inter_bugs = await client.fetch_intermittent_bugs()

            aggregator = FailureAggregator(client.fetch_comments, config, self.extractor)
            intermittents = await aggregator.analyze_all(inter_bugs)

            logger.info("Fetching perma bugs")
            perma_bugs = await client.fetch_perma_bugs(now, config.days_back)
            permas = list_perma_bugs(perma_bugs, config)

        elapsed = round(time.time() - start_time, 2)
        logger.info(
            "Triage pass done in %.2fs: %d intermittent(s), %d perma(s)",
            elapsed, len(intermittents), len(permas),
        )
        return ReportData(
            intermittents=intermittents,
            permas=permas,
            generated=now.astimezone(timezone.utc),
            elapsed_seconds=elapsed,
        )
