"""
Service Container
=================

Purpose
-------
Dependency injection container for the Guildhall domain services. Builds one
instance of each service and hands them out through properties.

Responsibilities
----------------
- Bring the database subsystem up before services are used
- Construct every domain service with (config, event_bus, logger)
- Tear the database subsystem down on shutdown

Non-Responsibilities
--------------------
- Business logic
- Request routing (callers own their transport layer)

Usage
-----
    container = ServiceContainer(Config, EventBus(), get_logger(__name__))
    await container.initialize()

    record = await container.vote_ledger.cast_vote(suggestion_id, user_id, "upvote")

    await container.shutdown()
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from guildhall.core.database.bootstrap import (
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from guildhall.core.logging.logger import get_logger
from guildhall.modules.announcements import AnnouncementService
from guildhall.modules.characters import CharacterService
from guildhall.modules.events import EventService
from guildhall.modules.gallery import GalleryService
from guildhall.modules.guides import GuideService
from guildhall.modules.recruitment import RecruitmentService
from guildhall.modules.suggestions import SuggestionService, SuggestionVoteLedger
from guildhall.modules.teams import TeamService
from guildhall.modules.treasury import TreasuryService
from guildhall.modules.users import UserService

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus

_NOT_INITIALIZED = "ServiceContainer not initialized. Call initialize() first."


class ServiceContainer:
    """
    Holds a single instance of every domain service.

    Usage:
        container = ServiceContainer(Config, event_bus, logger)
        await container.initialize()
        teams = container.teams
    """

    SERVICE_COUNT = 11

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config
        self._event_bus = event_bus
        self._logger = logger

        self._users: Optional[UserService] = None
        self._characters: Optional[CharacterService] = None
        self._teams: Optional[TeamService] = None
        self._events: Optional[EventService] = None
        self._suggestions: Optional[SuggestionService] = None
        self._vote_ledger: Optional[SuggestionVoteLedger] = None
        self._recruitment: Optional[RecruitmentService] = None
        self._guides: Optional[GuideService] = None
        self._treasury: Optional[TreasuryService] = None
        self._announcements: Optional[AnnouncementService] = None
        self._gallery: Optional[GalleryService] = None

        self._initialized = False
        self._owns_database = False

        self._service_init_times: Dict[str, float] = {}
        self._init_start: Optional[float] = None
        self._init_end: Optional[float] = None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(
        self,
        *,
        init_database: bool = True,
        create_schema: bool = False,
    ) -> None:
        """
        Initialize the database subsystem (unless ``init_database`` is False)
        and construct all services.
        """
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        self._init_start = time.perf_counter()
        self._logger.info("Service container initialization starting...")

        try:
            if init_database:
                await initialize_database_subsystem(create_schema=create_schema)
                self._owns_database = True

            self._users = self._create_service("users", UserService)
            self._characters = self._create_service("characters", CharacterService)
            self._teams = self._create_service("teams", TeamService)
            self._events = self._create_service("events", EventService)
            self._suggestions = self._create_service("suggestions", SuggestionService)
            self._vote_ledger = self._create_service("vote_ledger", SuggestionVoteLedger)
            self._recruitment = self._create_service("recruitment", RecruitmentService)
            self._guides = self._create_service("guides", GuideService)
            self._treasury = self._create_service("treasury", TreasuryService)
            self._announcements = self._create_service("announcements", AnnouncementService)
            self._gallery = self._create_service("gallery", GalleryService)

            self._init_end = time.perf_counter()
            self._initialized = True

            self._logger.info(
                "Service container initialized successfully",
                extra={
                    "total_time_seconds": round(self._init_end - self._init_start, 3),
                    "service_count": len(self._service_init_times),
                },
            )

        except Exception as e:
            self._logger.critical(
                "Service container initialization failed",
                exc_info=True,
                extra={"error": str(e)},
            )
            if self._owns_database:
                await shutdown_database_subsystem()
                self._owns_database = False
            raise

    def _create_service(self, name: str, cls: type) -> Any:
        start = time.perf_counter()

        try:
            instance = cls(
                config=self._config,
                event_bus=self._event_bus,
                logger=get_logger(f"{cls.__module__}.{cls.__name__}"),
            )
        except Exception:
            self._logger.error(f"Failed to initialize {name}", exc_info=True)
            raise

        duration = time.perf_counter() - start
        self._service_init_times[name] = duration
        self._logger.debug(f"Initialized {name} in {duration:.3f}s")

        return instance

    async def shutdown(self) -> None:
        """Drop service references and dispose the database engine if we opened it."""
        if not self._initialized:
            return

        self._logger.info("Shutting down service container...")

        if self._owns_database:
            await shutdown_database_subsystem()
            self._owns_database = False

        self._initialized = False
        self._logger.info("Service container shut down")

    async def health_check(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "service_count": len(self._service_init_times),
            "total_init_time_seconds": (
                round(self._init_end - self._init_start, 3)
                if self._init_start and self._init_end
                else None
            ),
            "all_services_available": self._initialized
            and len(self._service_init_times) == self.SERVICE_COUNT,
        }

    # ========================================================================
    # Services
    # ========================================================================

    @property
    def users(self) -> UserService:
        if not self._initialized or self._users is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._users

    @property
    def characters(self) -> CharacterService:
        if not self._initialized or self._characters is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._characters

    @property
    def teams(self) -> TeamService:
        if not self._initialized or self._teams is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._teams

    @property
    def events(self) -> EventService:
        if not self._initialized or self._events is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._events

    @property
    def suggestions(self) -> SuggestionService:
        if not self._initialized or self._suggestions is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._suggestions

    @property
    def vote_ledger(self) -> SuggestionVoteLedger:
        if not self._initialized or self._vote_ledger is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._vote_ledger

    @property
    def recruitment(self) -> RecruitmentService:
        if not self._initialized or self._recruitment is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._recruitment

    @property
    def guides(self) -> GuideService:
        if not self._initialized or self._guides is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._guides

    @property
    def treasury(self) -> TreasuryService:
        if not self._initialized or self._treasury is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._treasury

    @property
    def announcements(self) -> AnnouncementService:
        if not self._initialized or self._announcements is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._announcements

    @property
    def gallery(self) -> GalleryService:
        if not self._initialized or self._gallery is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._gallery

    @property
    def is_initialized(self) -> bool:
        return self._initialized
