"""
Pytest Configuration and Fixtures for Guildhall Tests
=====================================================

Purpose
-------
Centralized fixtures for the Guildhall test suite: database lifecycle,
domain services wired to a private EventBus, and small factories for test
data.

Responsibilities
----------------
- Point Config at a throwaway SQLite file before any guildhall import
- Initialize/shutdown DatabaseService around each database test
- Provide services built the same way ServiceContainer builds them
- Record published domain events for assertions

Architecture Notes
------------------
- Unit and service tests run against a fresh SQLite file per test
  (aiosqlite, NullPool). SQLite transactions begin IMMEDIATE, so
  overlapping writers are safe here too (see test_sqlite_concurrency.py).
- Integration tests (tests/integration) start PostgreSQL with
  testcontainers and are skipped when Docker is unavailable.
"""

from __future__ import annotations

import itertools
import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List

_TEST_ROOT = tempfile.mkdtemp(prefix="guildhall-tests-")

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT}/bootstrap.db")
os.environ.setdefault("LOGS_DIR", os.path.join(_TEST_ROOT, "logs"))
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_COLORS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio

from guildhall.core.config.config import Config
from guildhall.core.database.service import DatabaseService
from guildhall.core.event.bus import EventBus
from guildhall.core.logging.logger import get_logger
from guildhall.modules.announcements import AnnouncementService
from guildhall.modules.characters import CharacterService
from guildhall.modules.characters.records import CharacterRecord
from guildhall.modules.events import EventService
from guildhall.modules.events.records import EventRecord
from guildhall.modules.gallery import GalleryService
from guildhall.modules.guides import GuideService
from guildhall.modules.recruitment import RecruitmentService
from guildhall.modules.suggestions import SuggestionService, SuggestionVoteLedger
from guildhall.modules.suggestions.records import SuggestionRecord
from guildhall.modules.teams import TeamService
from guildhall.modules.teams.records import TeamRecord
from guildhall.modules.treasury import TreasuryService
from guildhall.modules.users import UserService
from guildhall.modules.users.records import UserRecord

logger = get_logger(__name__)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'guildhall.db'}"


@pytest_asyncio.fixture
async def database(sqlite_url: str, monkeypatch) -> AsyncGenerator[type, None]:
    """
    Fresh schema on a per-test SQLite file.

    Scope: function (clean slate per test)
    """
    monkeypatch.setattr(Config, "DATABASE_URL", sqlite_url)

    await DatabaseService.initialize()
    await DatabaseService.create_schema()

    yield DatabaseService

    await DatabaseService.shutdown()


# ============================================================================
# EVENT FIXTURES
# ============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published_events(event_bus: EventBus) -> List[Dict[str, Any]]:
    """Every event published on ``event_bus``, as {"name": ..., "data": ...}."""
    received: List[Dict[str, Any]] = []

    def make_recorder(name: str) -> Callable[[Dict[str, Any]], None]:
        def record(payload: Dict[str, Any]) -> None:
            received.append({"name": name, "data": payload})

        return record

    for name in (
        "user.created",
        "user.updated",
        "character.created",
        "team.created",
        "team.member_joined",
        "event.created",
        "event.registered",
        "suggestion.created",
        "suggestion.status_changed",
        "suggestion.vote_cast",
        "suggestion.vote_switched",
        "recruitment.application_created",
        "recruitment.application_reviewed",
        "guide.created",
        "guide.reviewed",
        "treasury.fee_created",
        "treasury.payment_submitted",
        "treasury.payment_verified",
        "announcement.created",
        "gallery.image_created",
    ):
        event_bus.subscribe(name, make_recorder(name), identifier=f"recorder:{name}")

    return received


@pytest.fixture
def mock_event_bus(mocker):
    """
    Mock EventBus for tests that only check publish calls.

    Scope: function
    """
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock(return_value=[])
    mock_bus.subscribe = mocker.MagicMock()
    return mock_bus


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def user_service(database, event_bus) -> UserService:
    return UserService(Config, event_bus, get_logger("tests.users"))


@pytest.fixture
def character_service(database, event_bus) -> CharacterService:
    return CharacterService(Config, event_bus, get_logger("tests.characters"))


@pytest.fixture
def team_service(database, event_bus) -> TeamService:
    return TeamService(Config, event_bus, get_logger("tests.teams"))


@pytest.fixture
def event_service(database, event_bus) -> EventService:
    return EventService(Config, event_bus, get_logger("tests.events"))


@pytest.fixture
def suggestion_service(database, event_bus) -> SuggestionService:
    return SuggestionService(Config, event_bus, get_logger("tests.suggestions"))


@pytest.fixture
def vote_ledger(database, event_bus) -> SuggestionVoteLedger:
    return SuggestionVoteLedger(Config, event_bus, get_logger("tests.vote_ledger"))


@pytest.fixture
def recruitment_service(database, event_bus) -> RecruitmentService:
    return RecruitmentService(Config, event_bus, get_logger("tests.recruitment"))


@pytest.fixture
def guide_service(database, event_bus) -> GuideService:
    return GuideService(Config, event_bus, get_logger("tests.guides"))


@pytest.fixture
def treasury_service(database, event_bus) -> TreasuryService:
    return TreasuryService(Config, event_bus, get_logger("tests.treasury"))


@pytest.fixture
def announcement_service(database, event_bus) -> AnnouncementService:
    return AnnouncementService(Config, event_bus, get_logger("tests.announcements"))


@pytest.fixture
def gallery_service(database, event_bus) -> GalleryService:
    return GalleryService(Config, event_bus, get_logger("tests.gallery"))


# ============================================================================
# FACTORIES
# ============================================================================


@pytest.fixture
def make_user(user_service: UserService) -> Callable[..., Awaitable[UserRecord]]:
    counter = itertools.count(1)

    async def _make_user(**overrides: Any) -> UserRecord:
        n = next(counter)
        params: Dict[str, Any] = {
            "discord_id": f"31415926535{n:05d}",
            "discord_username": f"member{n}",
        }
        params.update(overrides)
        return await user_service.create_user(**params)

    return _make_user


@pytest.fixture
def make_character(
    character_service: CharacterService,
) -> Callable[..., Awaitable[CharacterRecord]]:
    counter = itertools.count(1)

    async def _make_character(user_id: int, **overrides: Any) -> CharacterRecord:
        n = next(counter)
        params: Dict[str, Any] = {"ign": f"Hero{n}", "job": "gladiator"}
        params.update(overrides)
        return await character_service.create_character(user_id, **params)

    return _make_character


@pytest.fixture
def make_team(team_service: TeamService) -> Callable[..., Awaitable[TeamRecord]]:
    async def _make_team(created_by: int, **overrides: Any) -> TeamRecord:
        params: Dict[str, Any] = {"name": "Nest Runners"}
        params.update(overrides)
        return await team_service.create_team(created_by=created_by, **params)

    return _make_team


@pytest.fixture
def make_event(event_service: EventService) -> Callable[..., Awaitable[EventRecord]]:
    async def _make_event(created_by: int, **overrides: Any) -> EventRecord:
        params: Dict[str, Any] = {
            "title": "Red Dragon Nest",
            "description": "Weekly clear, bring potions",
            "event_date": datetime.now(timezone.utc) + timedelta(days=2),
            "max_slots": 8,
        }
        params.update(overrides)
        return await event_service.create_event(created_by=created_by, **params)

    return _make_event


@pytest.fixture
def make_suggestion(
    suggestion_service: SuggestionService,
) -> Callable[..., Awaitable[SuggestionRecord]]:
    async def _make_suggestion(created_by: int, **overrides: Any) -> SuggestionRecord:
        params: Dict[str, Any] = {
            "title": "Weekly nest schedule",
            "description": "Pin the raid schedule in the guild channel",
        }
        params.update(overrides)
        return await suggestion_service.create_suggestion(created_by=created_by, **params)

    return _make_suggestion
