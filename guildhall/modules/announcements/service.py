"""
AnnouncementService - dashboard announcements
=============================================

Handles:
- Posting an announcement
- The recent list shown on the dashboard (newest first, 10 by default)

Events:
- announcement.created
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Type

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Announcement, User
from guildhall.modules.announcements.records import AnnouncementRecord
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    ANNOUNCEMENT_CONTENT_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    RECENT_ANNOUNCEMENTS_LIMIT,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from guildhall.modules.shared.exceptions import NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class AnnouncementService(BaseService):
    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._announcement_repo = BaseRepository[Announcement](Announcement, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_announcement(
        self, title: str, content: str, created_by: int
    ) -> AnnouncementRecord:
        """
        Raises:
            ValidationError: Title 1-100 or content 1-2000 characters violated
            NotFoundError: Creator does not exist
        """
        title = InputValidator.validate_string(
            title, "title", min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
        )
        content = InputValidator.validate_string(
            content,
            "content",
            min_length=DESCRIPTION_MIN_LENGTH,
            max_length=ANNOUNCEMENT_CONTENT_MAX_LENGTH,
        )
        created_by = InputValidator.validate_id(created_by, "created_by")

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == created_by):
                raise NotFoundError("User", created_by, message="Creator user does not exist")

            announcement = self._announcement_repo.add(
                session,
                Announcement(title=title, content=content, created_by=created_by),
            )
            await self._announcement_repo.flush(session)
            record = AnnouncementRecord.from_model(announcement)

        self.log_operation("create_announcement", announcement_id=record.id)
        await self.emit_event(
            "announcement.created",
            {"announcement_id": record.id, "created_by": created_by, "title": record.title},
        )
        return record

    async def get_recent_announcements(
        self, limit: int = RECENT_ANNOUNCEMENTS_LIMIT
    ) -> List[AnnouncementRecord]:
        limit = InputValidator.validate_integer(limit, "limit", min_value=1, max_value=100)

        async with DatabaseService.get_session() as session:
            announcements = await self._announcement_repo.find_many_where(
                session,
                order_by=(Announcement.created_at.desc(), Announcement.id.desc()),
                limit=limit,
            )
            return [AnnouncementRecord.from_model(a) for a in announcements]
