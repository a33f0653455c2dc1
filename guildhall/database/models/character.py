"""
Character: an in-game character owned by a user.
Pure schema.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, IdMixin, TimestampMixin


class Character(Base, IdMixin, TimestampMixin):
    """
    Schema-only:
    - user_id (FK to users, owner)
    - ign (in-game name)
    - job (DragonNestJob value)
    - stats_screenshot_url (opaque URL)
    """

    __tablename__ = "characters"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ign: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    job: Mapped[str] = mapped_column(String(32), nullable=False)
    stats_screenshot_url: Mapped[Optional[str]] = mapped_column(String(1024), default=None)
