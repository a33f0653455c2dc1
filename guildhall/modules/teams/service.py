"""
TeamService - guild teams and team membership
=============================================

Handles:
- Team creation (capacity bounded by Config)
- Joining a team through the shared CapacityGate
- Team listing with member counts
- Member listing

Joining runs entirely inside one transaction holding the team row lock, so
concurrent joins to the same team can never push it past ``max_members``.

Events:
- team.created
- team.member_joined
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from sqlalchemy import func, select

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Team, TeamMember, User
from guildhall.modules.admission import AdmissionPolicy, CapacityGate
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    TEAM_DESCRIPTION_MAX_LENGTH,
    TEAM_NAME_MAX_LENGTH,
    TEAM_NAME_MIN_LENGTH,
)
from guildhall.modules.shared.exceptions import NotFoundError
from guildhall.modules.teams.records import MembershipRecord, TeamRecord

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


def _build_membership(team_id: int, user_id: int, _extra: Any) -> TeamMember:
    return TeamMember(team_id=team_id, user_id=user_id)


TEAM_ADMISSION = AdmissionPolicy[Team, TeamMember](
    action="join_team",
    parent_label="Team",
    parent_model=Team,
    capacity_attr="max_members",
    membership_model=TeamMember,
    parent_fk="team_id",
    build_row=_build_membership,
    parent_not_found="Team not found",
    user_not_found="User not found",
    already_admitted="User is already a member of this team",
    full="Team is full",
)


class TeamService(BaseService):
    """
    Team lifecycle and membership.

    Business Logic:
    - max_members within [TEAM_MIN_MEMBERS, TEAM_MAX_MEMBERS]
    - A user joins a given team at most once
    - The creator is not added as a member automatically
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._team_repo = BaseRepository[Team](Team, self.log)
        self._member_repo = BaseRepository[TeamMember](TeamMember, self.log)
        self._user_repo = BaseRepository[User](User, self.log)
        self._gate = CapacityGate[Team, TeamMember](TEAM_ADMISSION, self.log)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_team(
        self,
        name: str,
        created_by: int,
        max_members: Optional[int] = None,
        description: Optional[str] = None,
        discord_channel_id: Optional[str] = None,
    ) -> TeamRecord:
        """
        Create a team.

        Args:
            name: Team name (1-50 chars)
            created_by: Creating user's id
            max_members: Capacity; defaults to TEAM_DEFAULT_MAX_MEMBERS
            description: Optional description (up to 500 chars)
            discord_channel_id: Optional opaque channel reference

        Raises:
            ValidationError: Bad name, description or capacity
            NotFoundError: Creator does not exist
        """
        name = InputValidator.validate_string(
            name, "name", min_length=TEAM_NAME_MIN_LENGTH, max_length=TEAM_NAME_MAX_LENGTH
        )
        description = InputValidator.validate_optional_string(
            description, "description", max_length=TEAM_DESCRIPTION_MAX_LENGTH
        )
        discord_channel_id = InputValidator.validate_optional_string(
            discord_channel_id, "discord_channel_id", max_length=32
        )
        created_by = InputValidator.validate_id(created_by, "created_by")

        if max_members is None:
            max_members = self.get_config("TEAM_DEFAULT_MAX_MEMBERS", 5)
        max_members = InputValidator.validate_integer(
            max_members,
            "max_members",
            min_value=self.get_config("TEAM_MIN_MEMBERS", 2),
            max_value=self.get_config("TEAM_MAX_MEMBERS", 20),
        )

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == created_by):
                raise NotFoundError("User", created_by, message="Creator user not found")

            team = self._team_repo.add(
                session,
                Team(
                    name=name,
                    description=description,
                    created_by=created_by,
                    discord_channel_id=discord_channel_id,
                    max_members=max_members,
                ),
            )
            await self._team_repo.flush(session)
            record = TeamRecord.from_model(team)

        self.log_operation(
            "create_team", team_id=record.id, created_by=created_by, max_members=max_members
        )
        await self.emit_event(
            "team.created",
            {"team_id": record.id, "created_by": created_by, "max_members": max_members},
        )
        return record

    async def join_team(self, team_id: int, user_id: int) -> MembershipRecord:
        """
        Add a user to a team if it has room.

        Raises:
            ValidationError: Malformed ids
            NotFoundError: Team or user does not exist
            ConflictError: Already a member, or the team is full
        """
        team_id = InputValidator.validate_id(team_id, "team_id")
        user_id = InputValidator.validate_id(user_id, "user_id")

        async with DatabaseService.get_transaction() as session:
            admission = await self._gate.admit(session, team_id, user_id)
            record = MembershipRecord.from_model(admission.row)

        self.log_operation(
            "join_team",
            team_id=team_id,
            user_id=user_id,
            occupied=admission.occupied,
            capacity=admission.capacity,
        )
        await self.emit_event(
            "team.member_joined",
            {
                "team_id": team_id,
                "user_id": user_id,
                "member_count": admission.occupied,
                "max_members": admission.capacity,
            },
        )
        return record

    # =========================================================================
    # READS
    # =========================================================================

    async def _member_counts(self, session: AsyncSession) -> Dict[int, int]:
        stmt = select(TeamMember.team_id, func.count(TeamMember.id)).group_by(
            TeamMember.team_id
        )
        rows = (await session.execute(stmt)).all()
        return {team_id: count for team_id, count in rows}

    async def get_team(self, team_id: int) -> TeamRecord:
        team_id = InputValidator.validate_id(team_id, "team_id")

        async with DatabaseService.get_session() as session:
            team = await self._team_repo.get(session, team_id)
            if team is None:
                raise NotFoundError("Team", team_id, message="Team not found")
            count = await self._member_repo.count(session, TeamMember.team_id == team_id)
            return TeamRecord.from_model(team, member_count=count)

    async def list_teams(self) -> List[TeamRecord]:
        """All teams, oldest first, with current member counts."""
        async with DatabaseService.get_session() as session:
            teams = await self._team_repo.find_many_where(
                session, order_by=(Team.created_at, Team.id)
            )
            counts = await self._member_counts(session)
            return [TeamRecord.from_model(t, member_count=counts.get(t.id, 0)) for t in teams]

    async def get_team_members(self, team_id: int) -> List[MembershipRecord]:
        """Members of a team in join order. Unknown team ids give an empty list."""
        team_id = InputValidator.validate_id(team_id, "team_id")

        async with DatabaseService.get_session() as session:
            members = await self._member_repo.find_many_where(
                session,
                TeamMember.team_id == team_id,
                order_by=(TeamMember.joined_at, TeamMember.id),
            )
            return [MembershipRecord.from_model(m) for m in members]
