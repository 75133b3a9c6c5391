"""
Perma Lister
Turns the perma-failure listing into PermaBug rows. No scoring, no threshold.
"""
import logging
from typing import List, Optional, Sequence

from bugtriage.core.config import RunConfig
from bugtriage.models.bug import BugRecord
from bugtriage.models.result import PermaBug
from bugtriage.utils.links import bug_link, graph_link

logger = logging.getLogger(__name__)


def to_perma_bug(bug: BugRecord, config: RunConfig) -> PermaBug:
    return PermaBug(
        id=bug.id,
        link=bug_link(bug.id),
        summary=bug.summary,
        assignee=bug.assignee,
        graph_url=graph_link(bug.id, config.reference_time(), config.days_back),
        needinfo=bug.needinfo,
    )


def list_perma_bugs(bugs: Sequence[BugRecord], config: Optional[RunConfig] = None) -> List[PermaBug]:
    config = config or RunConfig()
    permas = [to_perma_bug(b, config) for b in bugs]
    logger.info("Listed %d perma bug(s)", len(permas))
    return permas
