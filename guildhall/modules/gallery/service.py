"""
GalleryService - guild screenshot gallery
=========================================

Handles:
- Adding an image (URL is stored as given, never fetched)
- Paged listing, newest first

Events:
- gallery.image_created
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Type

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import GalleryImage, User
from guildhall.modules.gallery.records import GalleryImageRecord
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    GALLERY_DEFAULT_PAGE_SIZE,
    GALLERY_DESCRIPTION_MAX_LENGTH,
    GALLERY_MAX_PAGE_SIZE,
    GALLERY_MAX_TAGS,
    GALLERY_TAG_MAX_LENGTH,
    GALLERY_TAG_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    URL_MAX_LENGTH,
)
from guildhall.modules.shared.exceptions import NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class GalleryService(BaseService):
    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._image_repo = BaseRepository[GalleryImage](GalleryImage, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_image(
        self,
        title: str,
        image_url: str,
        uploaded_by: int,
        description: Optional[str] = None,
        tags: Sequence[Any] = (),
    ) -> GalleryImageRecord:
        """
        Add an image to the gallery.

        Raises:
            ValidationError: Title/description/URL length, or more than 10 tags,
                or a tag outside 1-20 characters
            NotFoundError: Uploader does not exist
        """
        title = InputValidator.validate_string(
            title, "title", min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
        )
        image_url = InputValidator.validate_string(
            image_url, "image_url", min_length=1, max_length=URL_MAX_LENGTH
        )
        uploaded_by = InputValidator.validate_id(uploaded_by, "uploaded_by")
        description = InputValidator.validate_optional_string(
            description, "description", max_length=GALLERY_DESCRIPTION_MAX_LENGTH
        )
        tag_list = InputValidator.validate_string_list(
            tags,
            "tags",
            max_count=GALLERY_MAX_TAGS,
            min_length=GALLERY_TAG_MIN_LENGTH,
            max_length=GALLERY_TAG_MAX_LENGTH,
        )

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == uploaded_by):
                raise NotFoundError(
                    "User", uploaded_by, message=f"User with id {uploaded_by} does not exist"
                )

            image = self._image_repo.add(
                session,
                GalleryImage(
                    title=title,
                    description=description,
                    image_url=image_url,
                    uploaded_by=uploaded_by,
                    tags=tag_list,
                ),
            )
            await self._image_repo.flush(session)
            record = GalleryImageRecord.from_model(image)

        self.log_operation("create_image", image_id=record.id, tag_count=len(tag_list))
        await self.emit_event(
            "gallery.image_created",
            {"image_id": record.id, "uploaded_by": uploaded_by, "tags": list(record.tags)},
        )
        return record

    async def get_gallery_images(
        self, page: int = 1, limit: int = GALLERY_DEFAULT_PAGE_SIZE
    ) -> List[GalleryImageRecord]:
        """One page of images, newest first. Pages past the end are empty."""
        page = InputValidator.validate_positive_integer(page, "page")
        limit = InputValidator.validate_integer(
            limit, "limit", min_value=1, max_value=GALLERY_MAX_PAGE_SIZE
        )

        async with DatabaseService.get_session() as session:
            images = await self._image_repo.find_many_where(
                session,
                order_by=(GalleryImage.created_at.desc(), GalleryImage.id.desc()),
                limit=limit,
                offset=(page - 1) * limit,
            )
            return [GalleryImageRecord.from_model(i) for i in images]
