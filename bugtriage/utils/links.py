"""
Link builders for Bugzilla bug pages and Treeherder Orange Factor graphs.
"""
from datetime import datetime, timedelta
from urllib.parse import urlencode

from bugtriage.core.config import BUGZILLA_SHOW_URL, TREEHERDER_URL
from bugtriage.core.constants import DATE_FORMAT, DAYS_BACK


def bug_link(bug_id: int) -> str:
    return f"{BUGZILLA_SHOW_URL}?id={bug_id}"


def graph_link(bug_id: int, now: datetime, days_back: int = DAYS_BACK) -> str:
    """Orange Factor graph for `bug_id` covering the `days_back` days ending at `now`."""
    params = {
        "startday": (now - timedelta(days=days_back)).strftime(DATE_FORMAT),
        "endday": now.strftime(DATE_FORMAT),
        "tree": "all",
        "bug": bug_id,
    }
    return f"{TREEHERDER_URL}/intermittent-failures/bugdetails?{urlencode(params)}"
