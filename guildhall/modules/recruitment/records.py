"""
Read-only recruitment records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from guildhall.database.models import RecruitmentApplication


@dataclass(frozen=True, slots=True)
class ApplicationRecord:
    id: int
    user_id: int
    application_text: str
    status: str
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_model(cls, application: RecruitmentApplication) -> "ApplicationRecord":
        return cls(
            id=application.id,
            user_id=application.user_id,
            application_text=application.application_text,
            status=application.status,
            reviewed_by=application.reviewed_by,
            reviewed_at=application.reviewed_at,
            created_at=application.created_at,
        )
