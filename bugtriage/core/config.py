"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    BUGZILLA_URL         — Bugzilla REST bug endpoint (default: bugzilla.mozilla.org)
    TREEHERDER_URL       — Treeherder host used for Orange Factor graph links
    MAX_CONCURRENCY      — Max in-flight comment fetches (default: 15)
    REQUEST_TIMEOUT      — Per-request timeout in seconds (default: 30)
    OUTPUT_HTML          — Report file name (default: report.html)
    LOG_LEVEL            — Root log level (default: INFO)
    LOG_DIR              — Directory for the daily log file (default: logs)

Run Configuration:
    Threshold, lookback window and bot author are fixed in constants.py.
    RunConfig carries them (plus the concurrency limit) into the aggregator
    so tests can vary them without touching module globals.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from bugtriage.core.constants import AUTHOR_FILTER, DAYS_BACK, THRESHOLD

load_dotenv()

BUGZILLA_URL = os.getenv("BUGZILLA_URL", "https://bugzilla.mozilla.org/rest/bug")
BUGZILLA_SHOW_URL = os.getenv("BUGZILLA_SHOW_URL", "https://bugzilla.mozilla.org/show_bug.cgi")
TREEHERDER_URL = os.getenv("TREEHERDER_URL", "https://treeherder.mozilla.org")

MAX_CONCURRENCY = int(os.getenv("MAX_CONCURRENCY", 15))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", 30.0))

OUTPUT_HTML = os.getenv("OUTPUT_HTML", "report.html")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")


class RunConfig(BaseModel):
    """Per-run knobs passed into the aggregator and perma lister."""
    threshold: int = THRESHOLD
    days_back: int = DAYS_BACK
    author_filter: str = AUTHOR_FILTER
    concurrency: int = Field(default=MAX_CONCURRENCY, ge=1)
    now: Optional[datetime] = None

    def reference_time(self) -> datetime:
        """Return `now` (timezone-aware), defaulting to the current UTC time."""
        if self.now is None:
            return datetime.now(timezone.utc)
        if self.now.tzinfo is None:
            return self.now.replace(tzinfo=timezone.utc)
        return self.now

    @property
    def cutoff(self) -> datetime:
        return self.reference_time() - timedelta(days=self.days_back)
