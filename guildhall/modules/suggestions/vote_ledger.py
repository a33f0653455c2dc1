"""
SuggestionVoteLedger - vote casting and aggregate counters
==========================================================

Owns the suggestion/vote aggregate. A cast either inserts the user's first
vote, rejects a repeat of the same vote, or switches the existing vote to
the other type. The suggestion's ``upvotes``/``downvotes`` counters always
equal the number of vote rows of each type.

Concurrency:
- Every cast runs in one transaction that first locks the suggestion row
  (``SELECT ... FOR UPDATE``). Casts on the same suggestion serialize on
  that lock, so two simultaneous first votes by one user cannot both take
  the insert branch. On SQLite the transaction holds the database write
  lock from its first statement instead.
- Counters change through a single ``UPDATE ... SET upvotes = upvotes + 1``
  so the increment is computed by the database, never from a value read
  earlier in Python.
- Casts on different suggestions never contend.
- The (suggestion_id, user_id) unique constraint backs up the lock; if it
  ever fires, the IntegrityError propagates unchanged.

Events (published after commit):
- suggestion.vote_cast      first vote by a user
- suggestion.vote_switched  existing vote changed type
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple, Type

from sqlalchemy import update

from guildhall.core.database.base import utc_now
from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Suggestion, SuggestionVote, VoteType
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.exceptions import ConflictError, NotFoundError
from guildhall.modules.suggestions.records import VoteOutcome, VoteRecord

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class SuggestionVoteLedger(BaseService):
    """
    Applies one user's vote intent to a suggestion.

    Business Logic:
    - At most one vote row per (suggestion, user)
    - Same type twice -> ConflictError, nothing written
    - Different type -> same row flipped, +1 new counter, -1 old counter
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._suggestion_repo = BaseRepository[Suggestion](Suggestion, self.log)
        self._vote_repo = BaseRepository[SuggestionVote](SuggestionVote, self.log)

    async def cast_vote(
        self,
        suggestion_id: int,
        user_id: int,
        vote_type: Any,
    ) -> VoteRecord:
        """
        Cast or switch a vote.

        Args:
            suggestion_id: Suggestion being voted on
            user_id: Voting user
            vote_type: "upvote" or "downvote" (or a VoteType)

        Returns:
            The resulting vote (new or switched)

        Raises:
            ValidationError: Malformed ids or vote type
            NotFoundError: Suggestion does not exist
            ConflictError: User already cast this vote type on the suggestion
        """
        suggestion_id = InputValidator.validate_id(suggestion_id, "suggestion_id")
        user_id = InputValidator.validate_id(user_id, "user_id")
        vote = InputValidator.validate_enum(vote_type, "vote_type", VoteType)

        async with DatabaseService.get_transaction() as session:
            outcome = await self.apply_vote(session, suggestion_id, user_id, vote)

        self.log_operation(
            "cast_vote",
            suggestion_id=suggestion_id,
            user_id=user_id,
            vote_type=vote.value,
            switched=outcome.switched,
            upvotes=outcome.upvotes,
            downvotes=outcome.downvotes,
        )

        await self.emit_event(
            "suggestion.vote_switched" if outcome.switched else "suggestion.vote_cast",
            {
                "suggestion_id": suggestion_id,
                "user_id": user_id,
                "vote_type": vote.value,
                "previous_vote_type": outcome.previous_vote_type,
                "upvotes": outcome.upvotes,
                "downvotes": outcome.downvotes,
            },
        )

        return outcome.vote

    async def apply_vote(
        self,
        session: AsyncSession,
        suggestion_id: int,
        user_id: int,
        vote: VoteType,
    ) -> VoteOutcome:
        """
        Vote logic against an open transaction; the caller commits.

        Raises:
            NotFoundError: Suggestion does not exist
            ConflictError: Same vote type already cast
        """
        suggestion = await self._suggestion_repo.get_for_update(session, suggestion_id)
        if suggestion is None:
            raise NotFoundError(
                "Suggestion",
                suggestion_id,
                message=f"Suggestion with ID {suggestion_id} not found",
            )

        existing = await self._vote_repo.find_one_where(
            session,
            SuggestionVote.suggestion_id == suggestion_id,
            SuggestionVote.user_id == user_id,
        )

        now = utc_now()
        previous: Optional[VoteType] = None

        if existing is None:
            row = self._vote_repo.add(
                session,
                SuggestionVote(
                    suggestion_id=suggestion_id,
                    user_id=user_id,
                    vote_type=vote.value,
                    created_at=now,
                ),
            )
        else:
            previous = VoteType(existing.vote_type)
            if previous is vote:
                raise ConflictError(
                    "cast_vote",
                    f"User has already {vote.value}d this suggestion",
                    details={"suggestion_id": suggestion_id, "user_id": user_id},
                )
            existing.vote_type = vote.value
            existing.created_at = now
            row = existing

        await self._vote_repo.flush(session)
        upvotes, downvotes = await self._shift_counters(session, suggestion_id, vote, previous, now)

        return VoteOutcome(
            vote=VoteRecord.from_model(row),
            previous_vote_type=previous.value if previous is not None else None,
            upvotes=upvotes,
            downvotes=downvotes,
        )

    async def _shift_counters(
        self,
        session: AsyncSession,
        suggestion_id: int,
        vote: VoteType,
        previous: Optional[VoteType],
        now: datetime,
    ) -> Tuple[int, int]:
        """+1 on the new type's counter, -1 on the replaced one; returns (up, down)."""
        changes: Dict[str, Any] = {
            vote.counter_attr: getattr(Suggestion, vote.counter_attr) + 1,
            "updated_at": now,
        }
        if previous is not None:
            changes[previous.counter_attr] = getattr(Suggestion, previous.counter_attr) - 1

        stmt = (
            update(Suggestion)
            .where(Suggestion.id == suggestion_id)
            .values(**changes)
            .returning(Suggestion.upvotes, Suggestion.downvotes)
            .execution_options(synchronize_session="fetch")
        )
        upvotes, downvotes = (await session.execute(stmt)).one()
        return upvotes, downvotes
