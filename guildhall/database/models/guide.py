"""
Guide: member-written game guide, published after officer approval.
Pure schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, IdMixin, TimestampMixin
from guildhall.database.models.enums import ReviewStatus


class Guide(Base, IdMixin, TimestampMixin):
    """
    Schema-only:
    - title / content
    - status (ReviewStatus value, default pending)
    - created_by (FK to users)
    - approved_by (last reviewing officer) / approved_at (only when approved)
    """

    __tablename__ = "guides"
    __table_args__ = (Index("ix_guides_status", "status"),)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ReviewStatus.PENDING.value
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    approved_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), default=None, index=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=None
    )
