"""
Read-only guide records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from guildhall.database.models import Guide


@dataclass(frozen=True, slots=True)
class GuideRecord:
    id: int
    title: str
    content: str
    status: str
    created_by: int
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, guide: Guide) -> "GuideRecord":
        return cls(
            id=guide.id,
            title=guide.title,
            content=guide.content,
            status=guide.status,
            created_by=guide.created_by,
            approved_by=guide.approved_by,
            approved_at=guide.approved_at,
            created_at=guide.created_at,
            updated_at=guide.updated_at,
        )
