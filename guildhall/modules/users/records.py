"""
Read-only user record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from guildhall.database.models import User


@dataclass(frozen=True, slots=True)
class UserRecord:
    id: int
    discord_id: str
    discord_username: str
    discord_avatar: Optional[str]
    guild_role: str
    treasury_status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserRecord":
        return cls(
            id=user.id,
            discord_id=user.discord_id,
            discord_username=user.discord_username,
            discord_avatar=user.discord_avatar,
            guild_role=user.guild_role,
            treasury_status=user.treasury_status,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
