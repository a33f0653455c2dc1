"""
CharacterService - in-game characters owned by members
======================================================

A member can own any number of characters; event registration requires
one of them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Type

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Character, DragonNestJob, User
from guildhall.modules.characters.records import CharacterRecord
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import IGN_MAX_LENGTH, IGN_MIN_LENGTH, URL_MAX_LENGTH
from guildhall.modules.shared.exceptions import NotFoundError, ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class CharacterService(BaseService):
    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._character_repo = BaseRepository[Character](Character, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_character(
        self,
        user_id: int,
        ign: str,
        job: Any,
        stats_screenshot_url: Optional[str] = None,
    ) -> CharacterRecord:
        """
        Add a character to a member's roster.

        Raises:
            ValidationError: Bad ign, job or URL
            NotFoundError: Owner does not exist
        """
        user_id = InputValidator.validate_id(user_id, "user_id")
        ign = InputValidator.validate_string(
            ign, "ign", min_length=IGN_MIN_LENGTH, max_length=IGN_MAX_LENGTH
        )
        job_value = InputValidator.validate_enum(job, "job", DragonNestJob)
        stats_screenshot_url = InputValidator.validate_optional_string(
            stats_screenshot_url, "stats_screenshot_url", max_length=URL_MAX_LENGTH
        )

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == user_id):
                raise NotFoundError("User", user_id, message=f"User with id {user_id} not found")

            character = self._character_repo.add(
                session,
                Character(
                    user_id=user_id,
                    ign=ign,
                    job=job_value.value,
                    stats_screenshot_url=stats_screenshot_url,
                ),
            )
            await self._character_repo.flush(session)
            record = CharacterRecord.from_model(character)

        self.log_operation("create_character", character_id=record.id, user_id=user_id)
        await self.emit_event(
            "character.created",
            {"character_id": record.id, "user_id": user_id, "job": job_value.value},
        )
        return record

    async def get_characters_by_user(self, user_id: int) -> List[CharacterRecord]:
        user_id = InputValidator.validate_id(user_id, "user_id")

        async with DatabaseService.get_session() as session:
            characters = await self._character_repo.find_many_where(
                session, Character.user_id == user_id, order_by=(Character.id,)
            )
            return [CharacterRecord.from_model(c) for c in characters]

    async def update_character(
        self,
        character_id: int,
        ign: Optional[str] = None,
        job: Optional[Any] = None,
        stats_screenshot_url: Optional[str] = None,
    ) -> CharacterRecord:
        """
        Update the given fields of a character; omitted fields are unchanged.

        Raises:
            ValidationError: Nothing to change, or a bad value
            NotFoundError: Character does not exist
        """
        character_id = InputValidator.validate_id(character_id, "character_id")
        if ign is None and job is None and stats_screenshot_url is None:
            raise ValidationError("character", "Provide at least one field to update")

        changes = {}
        if ign is not None:
            changes["ign"] = InputValidator.validate_string(
                ign, "ign", min_length=IGN_MIN_LENGTH, max_length=IGN_MAX_LENGTH
            )
        if job is not None:
            changes["job"] = InputValidator.validate_enum(job, "job", DragonNestJob).value
        if stats_screenshot_url is not None:
            changes["stats_screenshot_url"] = InputValidator.validate_optional_string(
                stats_screenshot_url, "stats_screenshot_url", max_length=URL_MAX_LENGTH
            )

        async with DatabaseService.get_transaction() as session:
            character = await self._character_repo.get_for_update(session, character_id)
            if character is None:
                raise NotFoundError(
                    "Character",
                    character_id,
                    message=f"Character with id {character_id} not found",
                )

            for field, value in changes.items():
                setattr(character, field, value)

            await self._character_repo.flush(session)
            record = CharacterRecord.from_model(character)

        self.log_operation(
            "update_character", character_id=character_id, fields=sorted(changes)
        )
        return record
