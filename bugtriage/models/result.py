"""
Result Models
=============
Pydantic models produced by the triage run and handed to the report writer.

ExtractionResult  — what one bot comment yields: summed failure count,
                    repository breakdown lines, platform labels.
ScoredResult      — one intermittent bug that crossed the threshold, with its
                    best (highest) extraction.
PermaBug          — one perma-failure bug; listed without scoring.
ReportData        — everything one report needs.
"""
from datetime import datetime
from typing import List

from pydantic import BaseModel


class ExtractionResult(BaseModel):
    total: int = 0
    breakdown: List[str] = []
    platforms: List[str] = []


class ScoredResult(BaseModel):
    id: int
    link: str
    number_failures: int
    summary: str = ""
    platforms: List[str] = []
    breakdown_list: List[str] = []
    needinfo: str = ""
    graph_link: str = ""
    assignee: str = ""


class PermaBug(BaseModel):
    id: int
    link: str
    summary: str = ""
    assignee: str = ""
    graph_url: str = ""
    needinfo: str = ""


class ReportData(BaseModel):
    intermittents: List[ScoredResult] = []
    permas: List[PermaBug] = []
    generated: datetime
    elapsed_seconds: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.intermittents and not self.permas
