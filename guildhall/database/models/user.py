"""
User: a guild member identified by their Discord account.
Pure schema.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, IdMixin, TimestampMixin
from guildhall.database.models.enums import GuildRole, TreasuryStatus


class User(Base, IdMixin, TimestampMixin):
    """
    Guild member.

    Schema-only:
    - discord_id (unique, stored as text)
    - discord_username / discord_avatar
    - guild_role (GuildRole value, default recruit)
    - treasury_status (TreasuryStatus value, default pending)
    """

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_guild_role", "guild_role"),)

    discord_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    discord_username: Mapped[str] = mapped_column(String(100), nullable=False)
    discord_avatar: Mapped[Optional[str]] = mapped_column(String(512), default=None)

    guild_role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=GuildRole.RECRUIT.value
    )
    treasury_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TreasuryStatus.PENDING.value
    )
