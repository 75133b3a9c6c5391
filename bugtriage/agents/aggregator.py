"""
Failure Aggregator
==================
Scores intermittent bugs by their recent Orange Factor bot comments.

Pipeline:
    1. One task per bug, launched together (asyncio.gather)
    2. Each task takes a semaphore permit for its comment fetch
    3. Comments scanned newest → oldest; the highest summed count wins
    4. Passing results inserted into a shared dict under a lock
    5. Barrier, then flatten and sort descending by failure count

Contract:
    - Only bugs with number_failures >= threshold are returned.
    - A bug whose fetch fails contributes nothing; the run never fails
      because of a single bug.
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from bugtriage.core.config import RunConfig
from bugtriage.models.bug import BugRecord
from bugtriage.models.comment import Comment
from bugtriage.models.result import ExtractionResult, ScoredResult
from bugtriage.parser.breakdown_parser import SectionExtractor, parse_breakdown
from bugtriage.utils.links import bug_link, graph_link

logger = logging.getLogger(__name__)

CommentFetcher = Callable[[int], Awaitable[Optional[List[Comment]]]]


# ---------------------------------------------------------------------------
# Per-bug scoring
# ---------------------------------------------------------------------------
def best_extraction(
    comments: Sequence[Comment],
    cutoff: datetime,
    author_filter: str,
    extractor: Optional[SectionExtractor] = None,
) -> Optional[ExtractionResult]:
    """
    Highest-scoring breakdown among the bot's comments since `cutoff`.

    Comments are walked newest first and a new best needs a strictly
    greater total, so among equal totals the most recent comment wins.
    Returns None when no comment qualifies.
    """
    best: Optional[ExtractionResult] = None

    for comment in reversed(comments):
        created = comment.created_at()
        if created is None or created < cutoff or comment.author != author_filter:
            continue

        extraction = parse_breakdown(comment.text, extractor)
        if extraction is None:
            continue

        if extraction.total > (best.total if best else 0):
            best = extraction

    return best


def score_bug(
    bug: BugRecord,
    comments: Sequence[Comment],
    config: RunConfig,
    extractor: Optional[SectionExtractor] = None,
) -> Optional[ScoredResult]:
    """ScoredResult for `bug`, or None if its best count is below threshold."""
    best = best_extraction(comments, config.cutoff, config.author_filter, extractor)
    if best is None or best.total < config.threshold:
        return None

    return ScoredResult(
        id=bug.id,
        link=bug_link(bug.id),
        number_failures=best.total,
        summary=bug.summary,
        platforms=best.platforms,
        breakdown_list=best.breakdown,
        needinfo=bug.needinfo,
        graph_link=graph_link(bug.id, config.reference_time(), config.days_back),
        assignee=bug.assignee,
    )


# ---------------------------------------------------------------------------
# Fan-out / fan-in
# ---------------------------------------------------------------------------
class FailureAggregator:
    """
    Bounded-concurrency fan-out over a list of bugs.

    `fetch_comments` is any coroutine function bug_id → comments | None,
    normally BugzillaClient.fetch_comments.
    """

    def __init__(
        self,
        fetch_comments: CommentFetcher,
        config: Optional[RunConfig] = None,
        extractor: Optional[SectionExtractor] = None,
    ) -> None:
        self.fetch_comments = fetch_comments
        self.config = config or RunConfig()
        self.extractor = extractor

    async def _analyze_bug(
        self,
        bug: BugRecord,
        semaphore: asyncio.Semaphore,
        lock: asyncio.Lock,
        results: Dict[int, ScoredResult],
    ) -> None:
        try:
            async with semaphore:
                comments = await self.fetch_comments(bug.id)
        except Exception as e:
            logger.warning("Dropping bug %d, fetch raised: %s", bug.id, e)
            return

        if not comments:
            return

        try:
            result = score_bug(bug, comments, self.config, self.extractor)
        except Exception as e:
            logger.warning("Dropping bug %d, scoring failed: %s", bug.id, e, exc_info=True)
            return

        if result is None:
            return

        async with lock:
            results[bug.id] = result

    async def analyze_all(self, bugs: Sequence[BugRecord]) -> List[ScoredResult]:
        """Score every bug; return passing results sorted by failure count, descending."""
        if not bugs:
            return []

        semaphore = asyncio.Semaphore(self.config.concurrency)
        lock = asyncio.Lock()
        results: Dict[int, ScoredResult] = {}

        logger.info(
            "Analyzing %d bug(s) with concurrency %d (cutoff %s)",
            len(bugs), self.config.concurrency, self.config.cutoff.isoformat(),
        )
        await asyncio.gather(
            *(self._analyze_bug(bug, semaphore, lock, results) for bug in bugs)
        )

        flat = sorted(results.values(), key=lambda r: r.number_failures, reverse=True)
        logger.info("%d of %d bug(s) at or above %d failures", len(flat), len(bugs), self.config.threshold)
        return flat
