"""
Read-only character record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from guildhall.database.models import Character


@dataclass(frozen=True, slots=True)
class CharacterRecord:
    id: int
    user_id: int
    ign: str
    job: str
    stats_screenshot_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, character: Character) -> "CharacterRecord":
        return cls(
            id=character.id,
            user_id=character.user_id,
            ign=character.ign,
            job=character.job,
            stats_screenshot_url=character.stats_screenshot_url,
            created_at=character.created_at,
            updated_at=character.updated_at,
        )
