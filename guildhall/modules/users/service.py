"""
UserService - guild roster
==========================

Handles:
- Registering a member by Discord account
- Lookup by internal id or Discord id
- Officer updates of guild role and treasury status

Events:
- user.created
- user.updated
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Type

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import GuildRole, TreasuryStatus, User
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    DISCORD_ID_MAX_LENGTH,
    DISCORD_USERNAME_MAX_LENGTH,
    URL_MAX_LENGTH,
)
from guildhall.modules.shared.exceptions import ConflictError, NotFoundError, ValidationError
from guildhall.modules.users.records import UserRecord

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class UserService(BaseService):
    """Guild member registration and roster management."""

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._user_repo = BaseRepository[User](User, self.log)

    async def create_user(
        self,
        discord_id: str,
        discord_username: str,
        discord_avatar: Optional[str] = None,
        guild_role: Any = GuildRole.RECRUIT,
    ) -> UserRecord:
        """
        Register a member. Treasury status always starts as pending.

        Raises:
            ValidationError: Bad Discord id, username or role
            ConflictError: Discord id already registered
        """
        discord_id = InputValidator.validate_string(
            discord_id, "discord_id", min_length=1, max_length=DISCORD_ID_MAX_LENGTH
        )
        discord_username = InputValidator.validate_string(
            discord_username,
            "discord_username",
            min_length=1,
            max_length=DISCORD_USERNAME_MAX_LENGTH,
        )
        discord_avatar = InputValidator.validate_optional_string(
            discord_avatar, "discord_avatar", max_length=URL_MAX_LENGTH
        )
        role = InputValidator.validate_enum(guild_role, "guild_role", GuildRole)

        async with DatabaseService.get_transaction() as session:
            if await self._user_repo.exists(session, User.discord_id == discord_id):
                raise ConflictError(
                    "create_user",
                    f"User with Discord ID {discord_id} already exists",
                    details={"discord_id": discord_id},
                )

            user = self._user_repo.add(
                session,
                User(
                    discord_id=discord_id,
                    discord_username=discord_username,
                    discord_avatar=discord_avatar,
                    guild_role=role.value,
                    treasury_status=TreasuryStatus.PENDING.value,
                ),
            )
            await self._user_repo.flush(session)
            record = UserRecord.from_model(user)

        self.log_operation("create_user", user_id=record.id, guild_role=role.value)
        await self.emit_event(
            "user.created",
            {"user_id": record.id, "discord_id": discord_id, "guild_role": role.value},
        )
        return record

    async def get_user(self, user_id: int) -> UserRecord:
        user_id = InputValidator.validate_id(user_id, "user_id")

        async with DatabaseService.get_session() as session:
            user = await self._user_repo.get(session, user_id)
            if user is None:
                raise NotFoundError("User", user_id, message=f"User with id {user_id} not found")
            return UserRecord.from_model(user)

    async def get_user_by_discord_id(self, discord_id: str) -> Optional[UserRecord]:
        """Lookup by Discord id; None when nobody registered with it."""
        discord_id = InputValidator.validate_string(
            discord_id, "discord_id", min_length=1, max_length=DISCORD_ID_MAX_LENGTH
        )

        async with DatabaseService.get_session() as session:
            user = await self._user_repo.find_one_where(session, User.discord_id == discord_id)
            return UserRecord.from_model(user) if user is not None else None

    async def list_users(self) -> List[UserRecord]:
        async with DatabaseService.get_session() as session:
            users = await self._user_repo.find_many_where(session, order_by=(User.id,))
            return [UserRecord.from_model(u) for u in users]

    async def update_user(
        self,
        user_id: int,
        guild_role: Optional[Any] = None,
        treasury_status: Optional[Any] = None,
    ) -> UserRecord:
        """
        Change a member's guild role and/or treasury status.

        Raises:
            ValidationError: Nothing to change, or unknown role/status
            NotFoundError: User does not exist
        """
        user_id = InputValidator.validate_id(user_id, "user_id")
        if guild_role is None and treasury_status is None:
            raise ValidationError("user", "Provide guild_role or treasury_status to update")

        role = (
            InputValidator.validate_enum(guild_role, "guild_role", GuildRole)
            if guild_role is not None
            else None
        )
        treasury = (
            InputValidator.validate_enum(treasury_status, "treasury_status", TreasuryStatus)
            if treasury_status is not None
            else None
        )

        async with DatabaseService.get_transaction() as session:
            user = await self._user_repo.get_for_update(session, user_id)
            if user is None:
                raise NotFoundError("User", user_id, message=f"User with id {user_id} not found")

            changes = {}
            if role is not None:
                user.guild_role = role.value
                changes["guild_role"] = role.value
            if treasury is not None:
                user.treasury_status = treasury.value
                changes["treasury_status"] = treasury.value

            await self._user_repo.flush(session)
            record = UserRecord.from_model(user)

        self.log_operation("update_user", user_id=user_id, **changes)
        await self.emit_event("user.updated", {"user_id": user_id, **changes})
        return record
