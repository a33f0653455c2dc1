"""
Read-only announcement record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from guildhall.database.models import Announcement


@dataclass(frozen=True, slots=True)
class AnnouncementRecord:
    id: int
    title: str
    content: str
    created_by: int
    created_at: datetime

    @classmethod
    def from_model(cls, announcement: Announcement) -> "AnnouncementRecord":
        return cls(
            id=announcement.id,
            title=announcement.title,
            content=announcement.content,
            created_by=announcement.created_by,
            created_at=announcement.created_at,
        )
