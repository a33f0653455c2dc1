"""
SuggestionService - the member suggestion board
===============================================

Handles:
- Creating suggestions
- Listing the board (newest first)
- Officer status changes (pending -> approved / rejected / implemented)

Voting lives in SuggestionVoteLedger; this service never touches the
upvote/downvote counters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Type

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Suggestion, SuggestionStatus, SuggestionVote, User
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from guildhall.modules.shared.exceptions import NotFoundError
from guildhall.modules.suggestions.records import SuggestionRecord, VoteRecord

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class SuggestionService(BaseService):
    """Suggestion board CRUD and status workflow."""

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._suggestion_repo = BaseRepository[Suggestion](Suggestion, self.log)
        self._vote_repo = BaseRepository[SuggestionVote](SuggestionVote, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_suggestion(
        self,
        title: str,
        description: str,
        created_by: int,
    ) -> SuggestionRecord:
        """
        Post a new suggestion with zeroed counters and status pending.

        Raises:
            ValidationError: Title or description length out of bounds
            NotFoundError: Author does not exist
        """
        title = InputValidator.validate_string(
            title, "title", min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
        )
        description = InputValidator.validate_string(
            description,
            "description",
            min_length=DESCRIPTION_MIN_LENGTH,
            max_length=DESCRIPTION_MAX_LENGTH,
        )
        created_by = InputValidator.validate_id(created_by, "created_by")

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == created_by):
                raise NotFoundError("User", created_by, message=f"User with ID {created_by} not found")

            suggestion = self._suggestion_repo.add(
                session,
                Suggestion(
                    title=title,
                    description=description,
                    status=SuggestionStatus.PENDING.value,
                    upvotes=0,
                    downvotes=0,
                    created_by=created_by,
                ),
            )
            await self._suggestion_repo.flush(session)
            record = SuggestionRecord.from_model(suggestion)

        self.log_operation("create_suggestion", suggestion_id=record.id, created_by=created_by)
        await self.emit_event(
            "suggestion.created",
            {"suggestion_id": record.id, "created_by": created_by, "title": record.title},
        )
        return record

    async def get_suggestion(self, suggestion_id: int) -> SuggestionRecord:
        suggestion_id = InputValidator.validate_id(suggestion_id, "suggestion_id")

        async with DatabaseService.get_session() as session:
            suggestion = await self._suggestion_repo.get(session, suggestion_id)
            if suggestion is None:
                raise NotFoundError(
                    "Suggestion",
                    suggestion_id,
                    message=f"Suggestion with ID {suggestion_id} not found",
                )
            return SuggestionRecord.from_model(suggestion)

    async def get_all_suggestions(
        self, status: Optional[Any] = None
    ) -> List[SuggestionRecord]:
        """All suggestions, newest first, optionally filtered by status."""
        conditions = []
        if status is not None:
            wanted = InputValidator.validate_enum(status, "status", SuggestionStatus)
            conditions.append(Suggestion.status == wanted.value)

        async with DatabaseService.get_session() as session:
            suggestions = await self._suggestion_repo.find_many_where(
                session,
                *conditions,
                order_by=(Suggestion.created_at.desc(), Suggestion.id.desc()),
            )
            return [SuggestionRecord.from_model(s) for s in suggestions]

    async def get_votes(self, suggestion_id: int) -> List[VoteRecord]:
        """Every vote row for a suggestion, oldest cast first."""
        suggestion_id = InputValidator.validate_id(suggestion_id, "suggestion_id")

        async with DatabaseService.get_session() as session:
            votes = await self._vote_repo.find_many_where(
                session,
                SuggestionVote.suggestion_id == suggestion_id,
                order_by=(SuggestionVote.created_at, SuggestionVote.id),
            )
            return [VoteRecord.from_model(v) for v in votes]

    async def update_suggestion_status(
        self,
        suggestion_id: int,
        status: Any,
    ) -> SuggestionRecord:
        """
        Change a suggestion's status. Counters are left untouched.

        Raises:
            ValidationError: Unknown status
            NotFoundError: Suggestion does not exist
        """
        suggestion_id = InputValidator.validate_id(suggestion_id, "suggestion_id")
        new_status = InputValidator.validate_enum(status, "status", SuggestionStatus)

        async with DatabaseService.get_transaction() as session:
            suggestion = await self._suggestion_repo.get_for_update(session, suggestion_id)
            if suggestion is None:
                raise NotFoundError(
                    "Suggestion",
                    suggestion_id,
                    message=f"Suggestion with id {suggestion_id} not found",
                )

            old_status = suggestion.status
            suggestion.status = new_status.value
            await self._suggestion_repo.flush(session)
            record = SuggestionRecord.from_model(suggestion)

        self.log_operation(
            "update_suggestion_status",
            suggestion_id=suggestion_id,
            old_status=old_status,
            new_status=new_status.value,
        )
        await self.emit_event(
            "suggestion.status_changed",
            {
                "suggestion_id": suggestion_id,
                "old_status": old_status,
                "new_status": new_status.value,
            },
        )
        return record
