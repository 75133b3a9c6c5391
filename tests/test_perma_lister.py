from datetime import datetime, timezone

from bugtriage.agents.perma_lister import list_perma_bugs
from bugtriage.core.config import RunConfig
from bugtriage.models.bug import BugFlag, BugRecord

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_every_record_listed_in_order():
    bugs = [
        BugRecord(id=11, summary="Perma raptor failure"),
        BugRecord(id=3, summary="Perma talos crash"),
    ]
    permas = list_perma_bugs(bugs, RunConfig(now=NOW))
    assert [p.id for p in permas] == [11, 3]
    assert permas[0].summary == "Perma raptor failure"
    assert permas[0].link.endswith("show_bug.cgi?id=11")


def test_assignee_and_needinfo():
    bugs = [
        BugRecord(id=1, assigned_to="nobody@mozilla.org"),
        BugRecord(
            id=2,
            assigned_to="owner@mozilla.com",
            flags=[BugFlag(name="needinfo", requestee="first@mozilla.com"),
                   BugFlag(name="needinfo", requestee="second@mozilla.com")],
        ),
        BugRecord(id=3, flags=[BugFlag(name="needinfo")]),
    ]
    permas = list_perma_bugs(bugs, RunConfig(now=NOW))
    assert permas[0].assignee == ""
    assert permas[1].assignee == "owner@mozilla.com"
    assert permas[1].needinfo == "first@mozilla.com"
    assert permas[2].needinfo == ""


def test_graph_url_window():
    permas = list_perma_bugs([BugRecord(id=555)], RunConfig(now=NOW))
    assert permas[0].graph_url == (
        "https://treeherder.mozilla.org/intermittent-failures/bugdetails"
        "?startday=2026-10-11&endday=2026-10-18&tree=all&bug=555"
    )


def test_empty_listing():
    assert list_perma_bugs([]) == []
