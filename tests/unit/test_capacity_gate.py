"""
Tests for CapacityGate
======================

Test Coverage
-------------
- The gate runs inside a caller-owned transaction and never commits
- Admission result carries occupancy and remaining room
- Team and event policies share one routine but keep their own wording
"""

import pytest
from sqlalchemy import func, select

from guildhall.core.database.service import DatabaseService
from guildhall.core.logging.logger import get_logger
from guildhall.database.models import TeamMember
from guildhall.modules.admission import Admission, CapacityGate
from guildhall.modules.events import EVENT_ADMISSION
from guildhall.modules.shared.exceptions import ConflictError
from guildhall.modules.teams import TEAM_ADMISSION

logger = get_logger(__name__)


async def membership_count(team_id: int) -> int:
    async with DatabaseService.get_session() as session:
        stmt = select(func.count()).select_from(TeamMember).where(TeamMember.team_id == team_id)
        return (await session.execute(stmt)).scalar_one()


@pytest.mark.unit
@pytest.mark.database
class TestCapacityGate:
    async def test_admission_reports_occupancy(self, make_user, make_team):
        creator = await make_user()
        team = await make_team(creator.id, max_members=3)
        gate = CapacityGate(TEAM_ADMISSION, logger)

        async with DatabaseService.get_transaction() as session:
            admission = await gate.admit(session, team.id, creator.id)

        assert isinstance(admission, Admission)
        assert admission.occupied == 1
        assert admission.capacity == 3
        assert admission.remaining == 2
        assert admission.row.id is not None
        assert await membership_count(team.id) == 1

    async def test_gate_does_not_commit(self, make_user, make_team):
        creator = await make_user()
        team = await make_team(creator.id, max_members=3)
        gate = CapacityGate(TEAM_ADMISSION, logger)

        async with DatabaseService.get_session() as session:
            await gate.admit(session, team.id, creator.id)
            await session.rollback()

        assert await membership_count(team.id) == 0

    async def test_caller_failure_after_admit_rolls_back(self, make_user, make_team):
        creator = await make_user()
        team = await make_team(creator.id, max_members=3)
        gate = CapacityGate(TEAM_ADMISSION, logger)

        with pytest.raises(RuntimeError):
            async with DatabaseService.get_transaction() as session:
                await gate.admit(session, team.id, creator.id)
                raise RuntimeError("downstream failure")

        assert await membership_count(team.id) == 0

    async def test_conflict_carries_structured_details(self, make_user, make_team):
        creator = await make_user()
        team = await make_team(creator.id, max_members=2)
        gate = CapacityGate(TEAM_ADMISSION, logger)
        others = [await make_user(), await make_user()]

        for user in others:
            async with DatabaseService.get_transaction() as session:
                await gate.admit(session, team.id, user.id)

        with pytest.raises(ConflictError) as exc_info:
            async with DatabaseService.get_transaction() as session:
                await gate.admit(session, team.id, creator.id)

        error = exc_info.value
        assert error.error_code == "CONFLICT_JOIN_TEAM"
        assert error.details["current"] == 2
        assert error.details["capacity"] == 2


@pytest.mark.unit
class TestPolicies:
    def test_policies_share_shape(self):
        assert TEAM_ADMISSION.capacity_attr == "max_members"
        assert EVENT_ADMISSION.capacity_attr == "max_slots"
        assert TEAM_ADMISSION.extra_check is None
        assert EVENT_ADMISSION.extra_check is not None

    def test_event_full_message_template(self):
        message = EVENT_ADMISSION.full.format(parent_id=7, user_id=1, current=4, capacity=4)

        assert message == "Event 7 is full (4/4 slots)"
