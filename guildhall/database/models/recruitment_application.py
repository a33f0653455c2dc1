"""
RecruitmentApplication: a recruit's request to become a full member.
Pure schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin
from guildhall.database.models.enums import ReviewStatus


class RecruitmentApplication(Base, IdMixin, CreatedAtMixin):
    """
    Schema-only:
    - user_id (FK to users, the applicant)
    - application_text
    - status (ReviewStatus value, default pending)
    - reviewed_by / reviewed_at (set once, by the reviewing officer)
    """

    __tablename__ = "recruitment_applications"
    __table_args__ = (Index("ix_recruitment_applications_status", "status"),)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    application_text: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ReviewStatus.PENDING.value
    )
    reviewed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), default=None)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=None
    )
