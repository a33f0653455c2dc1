"""
GuideService - member guides with officer approval
==================================================

Handles:
- Submitting a guide (always starts pending)
- The review queue (pending, oldest first) and the published list
  (approved, newest first)
- Reviewing a guide

A guide may be reviewed again after a decision, so an officer can pull an
approved guide or publish a rejected one. ``approved_by`` names the last
reviewer; ``approved_at`` is set only while the guide is approved.

Events:
- guide.created
- guide.reviewed
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Type

from guildhall.core.database.base import utc_now
from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Guide, ReviewStatus, User
from guildhall.modules.guides.records import GuideRecord
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    GUIDE_CONTENT_MAX_LENGTH,
    GUIDE_CONTENT_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from guildhall.modules.shared.exceptions import NotFoundError
from guildhall.modules.shared.review import validate_decision

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class GuideService(BaseService):
    """Guide submission and approval workflow."""

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._guide_repo = BaseRepository[Guide](Guide, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_guide(self, title: str, content: str, created_by: int) -> GuideRecord:
        """
        Submit a guide for review.

        Raises:
            ValidationError: Title 1-100 or content 100-10000 characters violated
            NotFoundError: Author does not exist
        """
        title = InputValidator.validate_string(
            title, "title", min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
        )
        content = InputValidator.validate_string(
            content,
            "content",
            min_length=GUIDE_CONTENT_MIN_LENGTH,
            max_length=GUIDE_CONTENT_MAX_LENGTH,
        )
        created_by = InputValidator.validate_id(created_by, "created_by")

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == created_by):
                raise NotFoundError(
                    "User", created_by, message=f"User with id {created_by} does not exist"
                )

            guide = self._guide_repo.add(
                session,
                Guide(
                    title=title,
                    content=content,
                    status=ReviewStatus.PENDING.value,
                    created_by=created_by,
                ),
            )
            await self._guide_repo.flush(session)
            record = GuideRecord.from_model(guide)

        self.log_operation("create_guide", guide_id=record.id, created_by=created_by)
        await self.emit_event(
            "guide.created",
            {"guide_id": record.id, "created_by": created_by, "title": record.title},
        )
        return record

    async def get_pending_guides(self) -> List[GuideRecord]:
        """Review queue, oldest submission first."""
        async with DatabaseService.get_session() as session:
            guides = await self._guide_repo.find_many_where(
                session,
                Guide.status == ReviewStatus.PENDING.value,
                order_by=(Guide.created_at, Guide.id),
            )
            return [GuideRecord.from_model(g) for g in guides]

    async def get_approved_guides(self) -> List[GuideRecord]:
        """Published guides, newest first."""
        async with DatabaseService.get_session() as session:
            guides = await self._guide_repo.find_many_where(
                session,
                Guide.status == ReviewStatus.APPROVED.value,
                order_by=(Guide.created_at.desc(), Guide.id.desc()),
            )
            return [GuideRecord.from_model(g) for g in guides]

    async def review_guide(self, guide_id: int, status: Any, approved_by: int) -> GuideRecord:
        """
        Approve or reject a guide.

        Raises:
            ValidationError: Status is not approved/rejected, or malformed ids
            NotFoundError: Guide or reviewer does not exist
        """
        guide_id = InputValidator.validate_id(guide_id, "guide_id")
        decision = validate_decision(status)
        approved_by = InputValidator.validate_id(approved_by, "approved_by")

        async with DatabaseService.get_transaction() as session:
            guide = await self._guide_repo.get_for_update(session, guide_id)
            if guide is None:
                raise NotFoundError("Guide", guide_id, message="Guide not found")

            if not await self._user_repo.exists(session, User.id == approved_by):
                raise NotFoundError("User", approved_by, message="Reviewer not found")

            previous_status = guide.status
            now = utc_now()
            guide.status = decision.value
            guide.approved_by = approved_by
            guide.approved_at = now if decision is ReviewStatus.APPROVED else None
            guide.updated_at = now

            await self._guide_repo.flush(session)
            record = GuideRecord.from_model(guide)

        self.log_operation(
            "review_guide",
            guide_id=guide_id,
            old_status=previous_status,
            new_status=decision.value,
            approved_by=approved_by,
        )
        await self.emit_event(
            "guide.reviewed",
            {
                "guide_id": guide_id,
                "old_status": previous_status,
                "new_status": decision.value,
                "approved_by": approved_by,
            },
        )
        return record
