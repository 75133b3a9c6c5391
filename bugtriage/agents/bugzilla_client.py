"""
Bugzilla Client
===============
Thin async wrapper over the Bugzilla REST API.

Endpoints:
    GET {BUGZILLA_URL}?<query>          — bug listings (intermittent / perma)
    GET {BUGZILLA_URL}/{id}/comment     — one bug's comment history

Error policy:
    - Listing failures are fatal → BugzillaError.
    - Comment fetch failures are per-bug → logged, None returned.
No retries.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from bugtriage.core.config import BUGZILLA_URL, REQUEST_TIMEOUT
from bugtriage.core.constants import (
    COMPONENTS,
    DATE_FORMAT,
    DAYS_BACK,
    PERMA_MARKER,
    PRODUCT,
)
from bugtriage.models.bug import BugListResponse, BugRecord
from bugtriage.models.comment import Comment, CommentBlock

logger = logging.getLogger(__name__)

LIST_FIELDS = "id,summary,flags,assigned_to"

QueryParams = List[Tuple[str, str]]


class BugzillaError(RuntimeError):
    """A listing query failed; the report cannot be built."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


def _component_params() -> QueryParams:
    return [("component", c) for c in COMPONENTS]


def intermittent_query() -> QueryParams:
    """Open Testing bugs tagged intermittent-failure in the perf components."""
    return [
        ("product", PRODUCT),
        ("keywords", "intermittent-failure"),
        ("keywords_type", "allwords"),
        ("resolution", "---"),
        ("include_fields", LIST_FIELDS),
    ] + _component_params()


def perma_query(now: datetime, days_back: int = DAYS_BACK) -> QueryParams:
    """Open Testing bugs with "Perma" in the title, changed in the last `days_back` days."""
    since = (now - timedelta(days=days_back)).strftime(DATE_FORMAT)
    return [
        ("product", PRODUCT),
        ("resolution", "---"),
        ("short_desc", PERMA_MARKER),
        ("short_desc_type", "allwordssubstr"),
        ("last_change_time", since),
        ("include_fields", LIST_FIELDS),
    ] + _component_params()


class BugzillaClient:
    """
    Shares one httpx.AsyncClient across all requests of a run.
    Use as an async context manager.
    """

    def __init__(
        self,
        base_url: str = BUGZILLA_URL,
        timeout: float = REQUEST_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Accept": "application/json",
            "User-Agent": "bugtriage-report",
        }
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "BugzillaClient":
        if self._client is None:
            self._client = httpx.AsyncClient(headers=self.headers, timeout=self.timeout)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("BugzillaClient used outside of 'async with'")
        return self._client

    async def _get_json(self, url: str, params: Optional[QueryParams] = None) -> Dict[str, Any]:
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def list_bugs(self, params: QueryParams) -> List[BugRecord]:
        """Run a listing query. Any failure is fatal."""
        url = self.base_url
        try:
            data = await self._get_json(url, params)
            listing = BugListResponse.model_validate(data)
        except httpx.HTTPStatusError as http_err:
            status_code = http_err.response.status_code
            raise BugzillaError(f"Bugzilla listing failed — HTTP {status_code}", url) from http_err
        except httpx.HTTPError as e:
            raise BugzillaError(f"Bugzilla listing failed: {e}", url) from e
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            raise BugzillaError(f"Bad bug listing JSON: {e}", url) from e

        logger.info("Bugzilla returned %d bug(s)", len(listing.bugs))
        return listing.bugs

    async def fetch_intermittent_bugs(self) -> List[BugRecord]:
        return await self.list_bugs(intermittent_query())

    async def fetch_perma_bugs(self, now: datetime, days_back: int = DAYS_BACK) -> List[BugRecord]:
        return await self.list_bugs(perma_query(now, days_back))

    async def fetch_comments(self, bug_id: int) -> Optional[List[Comment]]:
        """
        Comment history for one bug, oldest first.
        Returns None on transport errors, bad JSON or a missing entry.
        """
        url = f"{self.base_url}/{bug_id}/comment"
        try:
            data = await self._get_json(url)
            block = CommentBlock.model_validate(data)
        except httpx.HTTPError as e:
            logger.warning("Comment fetch failed for bug %d: %s", bug_id, e)
            return None
        except (ValueError, ValidationError) as e:
            logger.warning("Bad comment JSON for bug %d: %s", bug_id, e)
            return None

        comments = block.comments_for(bug_id)
        if comments is None:
            logger.debug("No comment entry for bug %d in response", bug_id)
        return comments
