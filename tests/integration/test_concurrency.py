"""
Integration Tests for concurrent admission and voting
=====================================================

Purpose
-------
Run many writers at once against real PostgreSQL and check that the parent
row lock keeps capacity and vote counters exact.

Test Coverage
-------------
- Concurrent joins never overfill a team
- Concurrent registrations never exceed event slots
- Racing duplicate votes leave a single row
- Counters equal vote rows after a burst of casts and switches
"""

import asyncio

import pytest
from sqlalchemy import func, select, text

from guildhall.database.models import SuggestionVote, TeamMember, VoteType
from guildhall.modules.shared.exceptions import ConflictError


def split_results(results):
    successes = [r for r in results if not isinstance(r, BaseException)]
    failures = [r for r in results if isinstance(r, BaseException)]
    return successes, failures


# ============================================================================
# INFRASTRUCTURE
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestPostgres:
    async def test_schema_created(self, database):
        async with database.get_session() as session:
            result = await session.execute(
                text(
                    "SELECT table_name FROM information_schema.tables "
                    "WHERE table_schema = 'public'"
                )
            )
            tables = {row.table_name for row in result.fetchall()}

        assert {"users", "teams", "team_members", "events", "suggestion_votes"} <= tables

    async def test_health_check(self, database):
        assert await database.health_check() is True


# ============================================================================
# ADMISSION
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestConcurrentAdmission:
    async def test_team_never_overfills(self, team_service, make_user, make_team):
        owner = await make_user()
        team = await make_team(owner.id, max_members=3)
        users = [await make_user() for _ in range(8)]

        results = await asyncio.gather(
            *(team_service.join_team(team.id, u.id) for u in users),
            return_exceptions=True,
        )
        joined, rejected = split_results(results)

        assert len(joined) == 3
        assert len(rejected) == 5
        assert all(isinstance(e, ConflictError) for e in rejected)
        assert all(e.message == "Team is full" for e in rejected)

        refreshed = await team_service.get_team(team.id)
        assert refreshed.member_count == 3

    async def test_same_user_joins_once(self, database, team_service, make_user, make_team):
        owner = await make_user()
        team = await make_team(owner.id, max_members=5)
        user = await make_user()

        results = await asyncio.gather(
            *(team_service.join_team(team.id, user.id) for _ in range(4)),
            return_exceptions=True,
        )
        joined, rejected = split_results(results)

        assert len(joined) == 1
        assert all(e.message == "User is already a member of this team" for e in rejected)

        async with database.get_session() as session:
            rows = await session.execute(
                select(func.count(TeamMember.id)).where(TeamMember.team_id == team.id)
            )
            assert rows.scalar_one() == 1

    async def test_event_slots_respected(
        self, event_service, make_user, make_character, make_event
    ):
        host = await make_user()
        event = await make_event(host.id, max_slots=4)
        entrants = []
        for _ in range(10):
            user = await make_user()
            character = await make_character(user.id)
            entrants.append((user.id, character.id))

        results = await asyncio.gather(
            *(event_service.register_for_event(event.id, uid, cid) for uid, cid in entrants),
            return_exceptions=True,
        )
        registered, rejected = split_results(results)

        assert len(registered) == 4
        assert len(rejected) == 6
        assert all(e.message == f"Event {event.id} is full (4/4 slots)" for e in rejected)
        assert len(await event_service.get_event_registrations(event.id)) == 4


# ============================================================================
# VOTING
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestConcurrentVoting:
    async def test_duplicate_first_votes(
        self, vote_ledger, suggestion_service, make_user, make_suggestion
    ):
        author = await make_user()
        suggestion = await make_suggestion(author.id)
        voter = await make_user()

        results = await asyncio.gather(
            *(vote_ledger.cast_vote(suggestion.id, voter.id, "upvote") for _ in range(5)),
            return_exceptions=True,
        )
        cast, rejected = split_results(results)

        assert len(cast) == 1
        assert len(rejected) == 4
        assert all(isinstance(e, ConflictError) for e in rejected)

        refreshed = await suggestion_service.get_suggestion(suggestion.id)
        assert (refreshed.upvotes, refreshed.downvotes) == (1, 0)
        assert len(await suggestion_service.get_votes(suggestion.id)) == 1

    async def test_counters_match_rows_after_burst(
        self, database, vote_ledger, suggestion_service, make_user, make_suggestion
    ):
        author = await make_user()
        suggestion = await make_suggestion(author.id)
        voters = [await make_user() for _ in range(12)]

        await asyncio.gather(
            *(
                vote_ledger.cast_vote(suggestion.id, v.id, "upvote" if i % 2 else "downvote")
                for i, v in enumerate(voters)
            )
        )
        # Every third voter flips; a few also repeat their new vote
        flips = [
            vote_ledger.cast_vote(suggestion.id, v.id, "downvote" if i % 2 else "upvote")
            for i, v in enumerate(voters)
            if i % 3 == 0
        ]
        repeats = [
            vote_ledger.cast_vote(suggestion.id, v.id, "downvote" if i % 2 else "upvote")
            for i, v in enumerate(voters)
            if i % 6 == 0
        ]
        await asyncio.gather(*flips, *repeats, return_exceptions=True)

        async with database.get_session() as session:
            result = await session.execute(
                select(SuggestionVote.vote_type, func.count(SuggestionVote.id))
                .where(SuggestionVote.suggestion_id == suggestion.id)
                .group_by(SuggestionVote.vote_type)
            )
            by_type = dict(result.all())

        refreshed = await suggestion_service.get_suggestion(suggestion.id)
        assert refreshed.upvotes == by_type.get(VoteType.UPVOTE.value, 0)
        assert refreshed.downvotes == by_type.get(VoteType.DOWNVOTE.value, 0)
        assert refreshed.upvotes + refreshed.downvotes == len(voters)
