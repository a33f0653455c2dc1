"""
Announcement: officer post shown on the guild dashboard.
Pure schema.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin


class Announcement(Base, IdMixin, CreatedAtMixin):
    __tablename__ = "announcements"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
