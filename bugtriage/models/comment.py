"""
Comment Model
Pydantic models for GET /rest/bug/{id}/comment.

    {"bugs": {"<id>": {"comments": [{"creation_time", "author", "text"}]}}}
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    creation_time: str = ""
    author: str = ""
    text: str = ""

    @field_validator("creation_time", "author", "text", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        # null or non-string fields spoil only this comment, never the payload
        return v if isinstance(v, str) else ""

    def created_at(self) -> Optional[datetime]:
        """Parse creation_time; None unless it is an ISO timestamp with an offset."""
        raw = self.creation_time.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return None
        return parsed


class CommentHistory(BaseModel):
    comments: List[Comment] = []


class CommentBlock(BaseModel):
    bugs: Dict[str, CommentHistory] = {}

    def comments_for(self, bug_id: int) -> Optional[List[Comment]]:
        entry = self.bugs.get(str(bug_id))
        if entry is None:
            return None
        return entry.comments
