"""
Event: a scheduled guild activity with a fixed number of slots.
Pure schema.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin
from guildhall.database.models.enums import EventStatus


class Event(Base, IdMixin, CreatedAtMixin):
    """
    Schema-only:
    - title / description
    - event_date
    - max_slots (capacity enforced on registration)
    - status (EventStatus value, default upcoming)
    - created_by (FK to users)
    """

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("max_slots > 0", name="max_slots_positive"),
        Index("ix_events_status_event_date", "status", "event_date"),
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_slots: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EventStatus.UPCOMING.value
    )
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
