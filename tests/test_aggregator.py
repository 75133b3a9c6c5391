"""
Unit Tests — Failure Aggregator
===============================
Per-bug scoring (newest-first running max, cutoff, author filter,
threshold) and the bounded fan-out / fan-in over many bugs.

Comment fetches are faked with plain coroutines — no Bugzilla.
"""
import asyncio
from datetime import datetime, timezone

import pytest

from bugtriage.agents.aggregator import FailureAggregator, best_extraction, score_bug
from bugtriage.core.config import RunConfig
from bugtriage.models.bug import BugFlag, BugRecord
from bugtriage.models.comment import Comment
from bugtriage.parser.breakdown_parser import HeadingSectionExtractor

BOT = "orangefactor@bots.tld"
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _bot_text(counts, platforms=()):
    lines = ["Failures were associated with this bug in the last 7 days.", "", "## Repository breakdown:"]
    lines += [f"* {repo}: {n}" for repo, n in counts.items()]
    lines += ["", "## Table", "|     |**opt**|", "|---|:-:|", "|**linux1804-64**|99|"]
    lines += [f"* {p}" for p in platforms]
    return "\n".join(lines)


def _comment(text, when="2026-10-17T10:00:00Z", author=BOT):
    return Comment(creation_time=when, author=author, text=text)


def _config(**overrides):
    overrides.setdefault("now", NOW)
    return RunConfig(**overrides)


def _bug(bug_id=1, **kwargs):
    kwargs.setdefault("summary", f"Intermittent perf failure {bug_id}")
    return BugRecord(id=bug_id, **kwargs)


# ===========================================================================
# 1. best_extraction / score_bug
# ===========================================================================
class TestScoreBug:

    def test_single_qualifying_comment(self):
        comments = [_comment(_bot_text({"autoland": 15, "mozilla-central": 10}, ["linux1804-64"]))]
        result = score_bug(_bug(), comments, _config())
        assert result is not None
        assert result.number_failures == 25
        assert result.platforms == ["linux1804-64"]
        assert result.breakdown_list == ["autoland: 15", "mozilla-central: 10"]

    def test_below_threshold_not_emitted(self):
        comments = [_comment(_bot_text({"autoland": 12}))]
        assert score_bug(_bug(), comments, _config()) is None

    def test_exactly_threshold_is_emitted(self):
        comments = [_comment(_bot_text({"autoland": 20}))]
        assert score_bug(_bug(), comments, _config()).number_failures == 20

    def test_running_max_over_all_comments(self):
        # Oldest first, as Bugzilla returns them
        comments = [
            _comment(_bot_text({"autoland": 40}, ["windows11-64"]), when="2026-10-12T10:00:00Z"),
            _comment(_bot_text({"autoland": 30}, ["linux1804-64"]), when="2026-10-17T10:00:00Z"),
        ]
        result = score_bug(_bug(), comments, _config())
        assert result.number_failures == 40
        assert result.platforms == ["windows11-64"]

    def test_tie_keeps_newest_comment(self):
        comments = [
            _comment(_bot_text({"old-repo": 25}), when="2026-10-12T10:00:00Z"),
            _comment(_bot_text({"new-repo": 25}), when="2026-10-17T10:00:00Z"),
        ]
        result = score_bug(_bug(), comments, _config())
        assert result.breakdown_list == ["new-repo: 25"]

    def test_comment_without_marker_ignored(self):
        comments = [
            _comment(_bot_text({"autoland": 21})),
            _comment("autoland: 500\nmozilla-central: 500", when="2026-10-17T11:00:00Z"),
        ]
        assert score_bug(_bug(), comments, _config()).number_failures == 21

    def test_author_mismatch_skipped(self):
        comments = [_comment(_bot_text({"autoland": 900}), author="dev@mozilla.com")]
        assert score_bug(_bug(), comments, _config()) is None

    def test_comment_before_cutoff_skipped(self):
        comments = [_comment(_bot_text({"autoland": 50}), when="2026-10-01T10:00:00Z")]
        assert score_bug(_bug(), comments, _config()) is None

    @pytest.mark.parametrize("when", ["yesterday", "", "2026-10-17T10:00:00"])
    def test_bad_or_naive_timestamp_skipped(self, when):
        comments = [_comment(_bot_text({"autoland": 50}), when=when)]
        assert score_bug(_bug(), comments, _config()) is None

    def test_offset_timestamp_accepted(self):
        comments = [_comment(_bot_text({"autoland": 50}), when="2026-10-17T10:00:00+02:00")]
        assert score_bug(_bug(), comments, _config()).number_failures == 50

    def test_zero_totals_give_no_best(self):
        comments = [_comment(_bot_text({"autoland": 0}))]
        assert best_extraction(comments, _config().cutoff, BOT) is None

    def test_threshold_and_author_come_from_config(self):
        comments = [_comment(_bot_text({"autoland": 5}), author="other-bot@bots.tld")]
        config = _config(threshold=5, author_filter="other-bot@bots.tld")
        assert score_bug(_bug(), comments, config).number_failures == 5

    def test_idempotent(self):
        comments = [
            _comment(_bot_text({"autoland": 22}, ["linux1804-64"]), when="2026-10-13T10:00:00Z"),
            _comment(_bot_text({"autoland": 31}, ["macosx1015-64"])),
        ]
        assert score_bug(_bug(), comments, _config()) == score_bug(_bug(), comments, _config())

    def test_bug_metadata_carried(self):
        bug = _bug(
            7,
            assigned_to="nobody@mozilla.org",
            flags=[
                BugFlag(name="review", requestee="r@mozilla.com"),
                BugFlag(name="needinfo", requestee=""),
                BugFlag(name="needinfo", requestee="ni@mozilla.com", setter="s@mozilla.com"),
            ],
        )
        result = score_bug(bug, [_comment(_bot_text({"autoland": 30}))], _config())
        assert result.id == 7
        assert result.link.endswith("show_bug.cgi?id=7")
        assert result.assignee == ""
        assert result.needinfo == "ni@mozilla.com"
        assert "startday=2026-10-11" in result.graph_link
        assert "endday=2026-10-18" in result.graph_link
        assert result.graph_link.endswith("bug=7")

    def test_alternate_extractor(self):
        comments = [_comment(_bot_text({"autoland": 26}, ["linux1804-64"]))]
        result = score_bug(_bug(), comments, _config(), extractor=HeadingSectionExtractor())
        assert result.number_failures == 26
        assert result.platforms == ["linux1804-64"]


# ===========================================================================
# 2. FailureAggregator.analyze_all
# ===========================================================================
def _fetcher_for(comment_map):
    async def fetch(bug_id):
        await asyncio.sleep(0)
        return comment_map.get(bug_id)
    return fetch


def test_analyze_all_sorted_and_filtered():
    async def run_test():
        comment_map = {
            1: [_comment(_bot_text({"autoland": 21}))],
            2: [_comment(_bot_text({"autoland": 90}))],
            3: [_comment(_bot_text({"autoland": 5}))],
            4: [_comment(_bot_text({"autoland": 45}))],
        }
        aggregator = FailureAggregator(_fetcher_for(comment_map), _config())
        results = await aggregator.analyze_all([_bug(i) for i in (1, 2, 3, 4, 5)])

        assert [r.id for r in results] == [2, 4, 1]
        assert all(r.number_failures >= 20 for r in results)
        counts = [r.number_failures for r in results]
        assert counts == sorted(counts, reverse=True)

    asyncio.run(run_test())


def test_analyze_all_empty():
    aggregator = FailureAggregator(_fetcher_for({}), _config())
    assert asyncio.run(aggregator.analyze_all([])) == []


def test_failed_fetch_drops_only_that_bug():
    async def run_test():
        async def fetch(bug_id):
            if bug_id == 2:
                raise RuntimeError("connection reset")
            if bug_id == 3:
                return None
            return [_comment(_bot_text({"autoland": 30}))]

        aggregator = FailureAggregator(fetch, _config())
        results = await aggregator.analyze_all([_bug(1), _bug(2), _bug(3)])
        assert [r.id for r in results] == [1]

    asyncio.run(run_test())


@pytest.mark.parametrize("limit", [1, 3, 15])
def test_concurrency_limit_never_exceeded(limit):
    state = {"in_flight": 0, "peak": 0, "calls": 0}

    async def fetch(bug_id):
        state["in_flight"] += 1
        state["calls"] += 1
        state["peak"] = max(state["peak"], state["in_flight"])
        await asyncio.sleep(0.001)
        state["in_flight"] -= 1
        return [_comment(_bot_text({"autoland": 20 + bug_id}))]

    aggregator = FailureAggregator(fetch, _config(concurrency=limit))
    results = asyncio.run(aggregator.analyze_all([_bug(i) for i in range(40)]))

    assert state["calls"] == 40
    assert state["peak"] <= limit
    assert len(results) == 40


def test_permit_released_on_error():
    async def run_test():
        async def fetch(bug_id):
            await asyncio.sleep(0)
            raise ConnectionError("down")

        # With one permit, a leaked slot would deadlock the second bug
        aggregator = FailureAggregator(fetch, _config(concurrency=1))
        results = await asyncio.wait_for(aggregator.analyze_all([_bug(1), _bug(2), _bug(3)]), timeout=5)
        assert results == []

    asyncio.run(run_test())


def test_one_result_per_bug_id():
    async def run_test():
        comment_map = {1: [
            _comment(_bot_text({"autoland": 25}), when="2026-10-13T10:00:00Z"),
            _comment(_bot_text({"autoland": 35})),
        ]}
        aggregator = FailureAggregator(_fetcher_for(comment_map), _config())
        results = await aggregator.analyze_all([_bug(1)])
        assert len(results) == 1
        assert results[0].number_failures == 35

    asyncio.run(run_test())
