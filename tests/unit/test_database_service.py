"""
Unit tests for DatabaseService, the bootstrap helpers and ServiceContainer.

Runs against per-test SQLite files.
"""

import pytest
from sqlalchemy import func, select

from guildhall.core.config.config import Config
from guildhall.core.database.bootstrap import (
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from guildhall.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)
from guildhall.core.event.bus import EventBus
from guildhall.core.exceptions import ConfigurationError
from guildhall.core.logging.logger import get_logger
from guildhall.core.services.container import ServiceContainer
from guildhall.database.models import User
from guildhall.modules.shared.base_service import BaseService


async def count_users(session) -> int:
    return (await session.execute(select(func.count(User.id)))).scalar_one()


@pytest.mark.unit
@pytest.mark.database
class TestTransactions:
    async def test_commit_on_success(self, database):
        async with database.get_transaction() as session:
            session.add(User(discord_id="100", discord_username="kaede"))

        async with database.get_session() as session:
            assert await count_users(session) == 1

    async def test_rollback_on_exception(self, database):
        with pytest.raises(RuntimeError, match="abort"):
            async with database.get_transaction() as session:
                session.add(User(discord_id="101", discord_username="sora"))
                await session.flush()
                raise RuntimeError("abort")

        async with database.get_session() as session:
            assert await count_users(session) == 0

    async def test_locked_entity_lookup(self, database):
        async with database.get_transaction() as session:
            user = User(discord_id="102", discord_username="rin")
            session.add(user)
            await session.flush()
            user_id = user.id

        async with database.get_transaction() as session:
            locked = await database.get_locked_entity(session, User, user_id)
            missing = await database.get_locked_entity(session, User, user_id + 1)

        assert locked.discord_username == "rin"
        assert missing is None

    async def test_health_and_pool_metrics(self, database):
        assert await database.health_check() is True
        # NullPool under TESTING
        assert database.get_pool_metrics() == {"pool_size": 0, "checked_out": 0, "overflow": 0}


@pytest.mark.unit
class TestLifecycle:
    async def test_use_before_initialize(self):
        await DatabaseService.shutdown()

        assert DatabaseService.is_initialized() is False
        assert await DatabaseService.health_check() is False
        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_session():
                pass

    async def test_missing_url(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "")

        with pytest.raises(DatabaseInitializationError, match="DATABASE_URL"):
            await DatabaseService.initialize()
        assert DatabaseService.is_initialized() is False

    async def test_bootstrap_round_trip(self, sqlite_url, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", sqlite_url)

        await initialize_database_subsystem(create_schema=True)
        await initialize_database_subsystem()
        assert DatabaseService.is_initialized()

        await shutdown_database_subsystem()
        await shutdown_database_subsystem()
        assert not DatabaseService.is_initialized()


@pytest.mark.unit
class TestServiceContainer:
    def test_properties_require_initialize(self):
        container = ServiceContainer(Config, EventBus(), get_logger(__name__))

        with pytest.raises(RuntimeError, match="not initialized"):
            container.teams

    async def test_initialize_wires_services(self, sqlite_url, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", sqlite_url)
        container = ServiceContainer(Config, EventBus(), get_logger(__name__))

        await container.initialize(create_schema=True)
        try:
            user = await container.users.create_user("271828182845904523", "kaede")
            team = await container.teams.create_team("Nest Runners", user.id, max_members=2)
            joined = await container.teams.join_team(team.id, user.id)
            announcement = await container.announcements.create_announcement(
                "Welcome", "Say hi in the guild channel", user.id
            )
            recent = await container.announcements.get_recent_announcements()

            health = await container.health_check()
            assert health["all_services_available"] is True
            assert joined.user_id == user.id
            assert [a.id for a in recent] == [announcement.id]
            assert health["service_count"] == ServiceContainer.SERVICE_COUNT == 11
        finally:
            await container.shutdown()

        assert not container.is_initialized
        assert not DatabaseService.is_initialized()


@pytest.mark.unit
class TestBaseServiceConfig:
    def test_required_key_missing(self):
        service = BaseService(Config, EventBus(), get_logger(__name__))

        assert service.get_config("TEAM_MAX_MEMBERS") == Config.TEAM_MAX_MEMBERS
        assert service.get_config("NOT_A_SETTING", default=3) == 3
        with pytest.raises(ConfigurationError):
            service.get_config("NOT_A_SETTING", required=True)
