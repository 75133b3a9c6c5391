"""
Orchestrator Tests
==================
End-to-end triage pass with BugzillaClient methods mocked.
"""
import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from bugtriage.agents.bugzilla_client import BugzillaClient, BugzillaError
from bugtriage.agents.orchestrator import ReportOrchestrator
from bugtriage.core.config import RunConfig
from bugtriage.models.bug import BugRecord
from bugtriage.models.comment import Comment

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _bot_comment(total):
    text = f"## Repository breakdown:\n* autoland: {total}\n\n## Table\n* windows11-64\n"
    return Comment(creation_time="2026-10-17T10:00:00Z", author="orangefactor@bots.tld", text=text)


def test_run_builds_report_data():
    comments = {1: [_bot_comment(50)], 2: [_bot_comment(3)]}

    async def run_test():
        with patch.object(BugzillaClient, "fetch_intermittent_bugs", new_callable=AsyncMock) as mock_inter, \
             patch.object(BugzillaClient, "fetch_perma_bugs", new_callable=AsyncMock) as mock_perma, \
             patch.object(BugzillaClient, "fetch_comments", new_callable=AsyncMock) as mock_comments:

            mock_inter.return_value = [BugRecord(id=1, summary="a"), BugRecord(id=2, summary="b")]
            mock_perma.return_value = [BugRecord(id=9, summary="Perma c")]
            mock_comments.side_effect = lambda bug_id: comments.get(bug_id)

            data = await ReportOrchestrator(config=RunConfig(now=NOW)).run()

            mock_perma.assert_awaited_once_with(NOW, 7)
            assert mock_comments.await_count == 2

        assert [r.id for r in data.intermittents] == [1]
        assert data.intermittents[0].platforms == ["windows11-64"]
        assert [p.id for p in data.permas] == [9]
        assert data.generated == NOW
        assert not data.is_empty

    asyncio.run(run_test())


def test_listing_failure_propagates():
    async def run_test():
        with patch.object(BugzillaClient, "fetch_intermittent_bugs",
                          new_callable=AsyncMock, side_effect=BugzillaError("down", "u")):
            with pytest.raises(BugzillaError):
                await ReportOrchestrator(config=RunConfig(now=NOW)).run()

    asyncio.run(run_test())


def test_empty_run():
    async def run_test():
        with patch.object(BugzillaClient, "fetch_intermittent_bugs", new_callable=AsyncMock, return_value=[]), \
             patch.object(BugzillaClient, "fetch_perma_bugs", new_callable=AsyncMock, return_value=[]):
            data = await ReportOrchestrator().run()
        assert data.is_empty

    asyncio.run(run_test())
