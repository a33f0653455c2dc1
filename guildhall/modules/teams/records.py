"""
Read-only records returned by TeamService.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from guildhall.database.models import Team, TeamMember


@dataclass(frozen=True, slots=True)
class TeamRecord:
    id: int
    name: str
    description: Optional[str]
    created_by: int
    discord_channel_id: Optional[str]
    max_members: int
    created_at: datetime
    member_count: int = 0

    @property
    def is_full(self) -> bool:
        return self.member_count >= self.max_members

    @classmethod
    def from_model(cls, team: Team, member_count: int = 0) -> "TeamRecord":
        return cls(
            id=team.id,
            name=team.name,
            description=team.description,
            created_by=team.created_by,
            discord_channel_id=team.discord_channel_id,
            max_members=team.max_members,
            created_at=team.created_at,
            member_count=member_count,
        )


@dataclass(frozen=True, slots=True)
class MembershipRecord:
    id: int
    team_id: int
    user_id: int
    joined_at: datetime

    @classmethod
    def from_model(cls, member: TeamMember) -> "MembershipRecord":
        return cls(
            id=member.id,
            team_id=member.team_id,
            user_id=member.user_id,
            joined_at=member.joined_at,
        )
