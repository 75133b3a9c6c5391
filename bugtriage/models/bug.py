"""
Bug Model
=========
Pydantic models for the Bugzilla listing payload.

    {"bugs": [{"id", "summary", "flags": [{"name", "requestee", "setter"}], "assigned_to"}]}

Fields:
    id           — Bugzilla bug number
    summary      — bug title
    assigned_to  — owner email; "nobody@mozilla.org" means unassigned
    flags        — review / needinfo flags, each with an optional requestee
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from bugtriage.core.constants import NEEDINFO_FLAG, UNASSIGNED


class BugFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    requestee: Optional[str] = None
    setter: Optional[str] = None


class BugRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    summary: str = ""
    flags: List[BugFlag] = []
    assigned_to: Optional[str] = None

    @property
    def needinfo(self) -> str:
        """Requestee of the first needinfo flag that names one, else ""."""
        for flag in self.flags:
            if flag.name == NEEDINFO_FLAG and flag.requestee:
                return flag.requestee
        return ""

    @property
    def assignee(self) -> str:
        """Owner email with the unassigned sentinel normalised to ""."""
        if not self.assigned_to or self.assigned_to == UNASSIGNED:
            return ""
        return self.assigned_to


class BugListResponse(BaseModel):
    bugs: List[BugRecord] = []
