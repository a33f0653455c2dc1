"""
Team: a bounded-size group formed inside the guild.
Pure schema.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin


class Team(Base, IdMixin, CreatedAtMixin):
    """
    Schema-only:
    - name / description
    - created_by (FK to users)
    - discord_channel_id (opaque, optional)
    - max_members (capacity enforced on join)

    Membership count is never stored; it is counted from team_members under
    a row lock on this table.
    """

    __tablename__ = "teams"
    __table_args__ = (
        CheckConstraint("max_members > 0", name="max_members_positive"),
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), default=None)
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    discord_channel_id: Mapped[Optional[str]] = mapped_column(String(32), default=None)
    max_members: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
