"""
Database Service - Core Infrastructure Layer

Purpose
-------
One async engine for the whole process, with the transaction, locking and
health helpers every Guildhall service uses to reach the relational store.

Responsibilities
----------------
- Own a single AsyncEngine and its pool
- Hand out read sessions and one-shot write transactions
- Enforce transaction discipline: commit on success, rollback on exception
- Support pessimistic row locking via ``SELECT ... FOR UPDATE``
- Apply a per-transaction statement_timeout on PostgreSQL
- Create and drop the schema for bootstrap and tests

Non-Responsibilities
--------------------
- Retrying failed transactions (errors surface to the caller unchanged)
- Domain logic or event emission

Architecture Notes
------------------
**Transaction Model**:
- ``get_transaction()`` is the only interface for state mutations
- Service code never calls ``session.commit()`` itself
- Admission and voting lock their parent row first, so concurrent calls on
  the same team, event or suggestion serialize on that lock

**Connection Pooling**:
- AsyncAdaptedQueuePool for PostgreSQL outside tests
- NullPool when TESTING is set or the URL is SQLite

**SQLite**:
- SQLite has no row locks, so every transaction opens with
  ``BEGIN IMMEDIATE`` and takes the database write lock up front
- Concurrent transactions wait on that lock (up to DATABASE_POOL_TIMEOUT
  seconds) instead of interleaving their check-then-act steps

Usage Example
-------------
>>> async with DatabaseService.get_transaction() as session:
...     team = await DatabaseService.get_locked_entity(session, Team, team_id)
...     session.add(TeamMember(team_id=team.id, user_id=user_id))
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional, Type, TypeVar

from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, Pool

from guildhall.core.config.config import Config
from guildhall.core.database.base import Base
from guildhall.core.exceptions import DatabaseError, should_alert
from guildhall.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_NOT_INITIALIZED = "DatabaseService.initialize() has not been called"


class DatabaseInitializationError(RuntimeError):
    """The engine could not be created from the current Config."""


class DatabaseNotInitializedError(RuntimeError):
    """A session was requested before ``initialize()`` ran."""


@dataclass(frozen=True)
class _DatabaseConfigSnapshot:
    """Immutable view of the database settings for the lifetime of the engine."""

    url: str
    echo: bool
    pool_class: Type[Pool]
    pool_size: int
    max_overflow: int
    pool_recycle: int
    pool_timeout: int
    statement_timeout_ms: int

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith(("postgresql://", "postgresql+asyncpg://"))

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def url_scheme(self) -> str:
        return self.url.split(":", 1)[0] if ":" in self.url else "unknown"


class DatabaseService:
    """
    Owns the one AsyncEngine and hands out sessions and transactions.

    Public API
    ----------
    - initialize() / shutdown()
    - get_session() -> read-only session
    - get_transaction() -> atomic write transaction
    - get_locked_entity() -> point lookup with a row lock
    - health_check(), get_pool_metrics()
    - create_schema() / drop_schema()
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _config_snapshot: Optional[_DatabaseConfigSnapshot] = None
    _init_lock: Optional[asyncio.Lock] = None

    # ========================================================================
    # Initialization & Shutdown
    # ========================================================================

    @classmethod
    def _lock(cls) -> asyncio.Lock:
        # Created lazily so the lock binds to the running loop
        if cls._init_lock is None:
            cls._init_lock = asyncio.Lock()
        return cls._init_lock

    @classmethod
    def _build_config_snapshot(cls) -> _DatabaseConfigSnapshot:
        """
        Build the configuration snapshot from Config.

        Raises
        ------
        DatabaseInitializationError
            If DATABASE_URL is missing.
        """
        database_url = getattr(Config, "DATABASE_URL", None)
        if not database_url or not isinstance(database_url, str):
            logger.error("DATABASE_URL is empty")
            raise DatabaseInitializationError(
                "DATABASE_URL must be configured as a non-empty string"
            )

        use_null_pool = Config.is_testing() or database_url.startswith("sqlite")

        snapshot = _DatabaseConfigSnapshot(
            url=database_url,
            echo=bool(Config.DATABASE_ECHO),
            pool_class=NullPool if use_null_pool else AsyncAdaptedQueuePool,
            pool_size=int(Config.DATABASE_POOL_SIZE),
            max_overflow=int(Config.DATABASE_MAX_OVERFLOW),
            pool_recycle=int(Config.DATABASE_POOL_RECYCLE),
            pool_timeout=int(Config.DATABASE_POOL_TIMEOUT),
            statement_timeout_ms=int(Config.DATABASE_STATEMENT_TIMEOUT_MS),
        )

        logger.debug(
            "Captured database settings",
            extra={
                "url_scheme": snapshot.url_scheme,
                "pool_class": snapshot.pool_class.__name__,
                "pool_size": snapshot.pool_size,
                "statement_timeout_ms": snapshot.statement_timeout_ms,
            },
        )
        return snapshot

    @classmethod
    async def initialize(cls) -> None:
        """
        Create the engine and session factory from Config.

        Idempotent; a second call while initialized is a no-op.

        Raises
        ------
        DatabaseInitializationError
            DATABASE_URL is empty or the engine cannot be built.
        """
        async with cls._lock():
            if cls._engine is not None:
                logger.debug("Database engine already exists")
                return

            logger.info("Creating database engine")

            try:
                config = cls._build_config_snapshot()

                engine_kwargs: dict[str, Any] = {
                    "echo": config.echo,
                    "poolclass": config.pool_class,
                }
                if config.pool_class is AsyncAdaptedQueuePool:
                    engine_kwargs.update(
                        {
                            "pool_size": config.pool_size,
                            "max_overflow": config.max_overflow,
                            "pool_recycle": config.pool_recycle,
                            "pool_timeout": config.pool_timeout,
                            "pool_pre_ping": True,
                        }
                    )
                if config.is_sqlite:
                    # Busy timeout: how long a writer waits for the database lock
                    engine_kwargs["connect_args"] = {"timeout": config.pool_timeout}

                cls._engine = create_async_engine(config.url, **engine_kwargs)
                if config.is_sqlite:
                    cls._install_sqlite_write_lock(cls._engine)
                cls._session_factory = async_sessionmaker(
                    bind=cls._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )
                cls._config_snapshot = config

                logger.info(
                    "Database engine ready",
                    extra={
                        "url_scheme": config.url_scheme,
                        "pool_class": config.pool_class.__name__,
                    },
                )

            except Exception as exc:
                logger.error(
                    "Could not create the database engine",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                cls._engine = None
                cls._session_factory = None
                cls._config_snapshot = None
                cls._init_lock = None
                if isinstance(exc, DatabaseInitializationError):
                    raise
                raise DatabaseInitializationError(
                    f"Database initialization failed: {exc}"
                ) from exc

    @staticmethod
    def _install_sqlite_write_lock(engine: AsyncEngine) -> None:
        """
        Make every SQLite transaction start with ``BEGIN IMMEDIATE``.

        The driver's own implicit BEGIN is switched off so the transaction
        (and the write lock) starts before the first SELECT. This is what
        serializes admission and voting on SQLite, where ``FOR UPDATE`` is
        not available.
        """

        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_begin(dbapi_connection: Any, connection_record: Any) -> None:
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn: Any) -> None:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        logger.debug("SQLite transactions will begin IMMEDIATE")

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine and reset state. Safe to call repeatedly."""
        async with cls._lock():
            if cls._engine is None:
                logger.debug("No database engine to dispose")
                return

            logger.info("Disposing database engine")
            try:
                await cls._engine.dispose()
                logger.info("Database engine disposed")
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._config_snapshot = None

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None and cls._session_factory is not None

    # ========================================================================
    # Schema
    # ========================================================================

    @classmethod
    async def create_schema(cls) -> None:
        """Create all tables registered on ``Base.metadata`` that do not exist."""
        engine = cls._get_engine()

        # Registers every model on Base.metadata
        import guildhall.database.models  # noqa: F401

        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (OperationalError, DBAPIError) as exc:
            logger.error("Schema creation failed", exc_info=True)
            raise DatabaseError("create_schema", exc) from exc
        logger.info(
            "Database schema ensured",
            extra={"tables": sorted(Base.metadata.tables.keys())},
        )

    @classmethod
    async def drop_schema(cls) -> None:
        engine = cls._get_engine()

        import guildhall.database.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("Database schema dropped")

    # ========================================================================
    # Health Check
    # ========================================================================

    @classmethod
    async def health_check(cls) -> bool:
        """
        Execute ``SELECT 1``.

        Returns False instead of raising; suitable for liveness checks.
        """
        if cls._engine is None:
            logger.warning("Database ping requested before initialize()")
            return False

        start = time.perf_counter()
        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (OperationalError, DBAPIError, OSError) as exc:
            logger.warning(
                "Database ping failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False
        finally:
            logger.debug(
                "Database ping finished",
                extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
            )

    @classmethod
    def get_pool_metrics(cls) -> dict[str, int]:
        """Connection pool statistics; all zeros for NullPool or before init."""
        empty = {"pool_size": 0, "checked_out": 0, "overflow": 0}

        if cls._engine is None or cls._config_snapshot is None:
            return empty
        if cls._config_snapshot.pool_class is NullPool:
            return empty

        pool = cls._engine.pool
        return {
            "pool_size": pool.size(),  # type: ignore[attr-defined]
            "checked_out": pool.checkedout(),  # type: ignore[attr-defined]
            "overflow": pool.overflow(),  # type: ignore[attr-defined]
        }

    # ========================================================================
    # Session & Transaction Context Managers
    # ========================================================================

    @classmethod
    def _get_engine(cls) -> AsyncEngine:
        if cls._engine is None:
            raise DatabaseNotInitializedError(_NOT_INITIALIZED)
        return cls._engine

    @classmethod
    def _ensure_initialized(cls) -> None:
        if cls._session_factory is None or cls._config_snapshot is None:
            logger.error("Database used before initialize()")
            raise DatabaseNotInitializedError(_NOT_INITIALIZED)

    @classmethod
    async def _apply_statement_timeout(cls, session: AsyncSession) -> None:
        config = cls._config_snapshot
        if config is not None and config.is_postgres:
            await session.execute(
                text(f"SET LOCAL statement_timeout = {config.statement_timeout_ms}")
            )

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session without automatic commit, for read-only queries.

        Raises
        ------
        DatabaseNotInitializedError
            ``initialize()`` has not run.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        async with cls._session_factory() as session:
            await cls._apply_statement_timeout(session)
            logger.debug("Read session opened")
            yield session

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in one atomic transaction.

        **On success** the transaction is committed.
        **On any exception** it is rolled back, logged and the original
        exception is re-raised unchanged. Domain errors are logged at debug
        level since they are expected outcomes, not failures.

        Raises
        ------
        DatabaseNotInitializedError
            ``initialize()`` has not run.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
                await session.commit()
                logger.debug(
                    "Transaction committed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

            except (OperationalError, DBAPIError) as exc:
                await session.rollback()
                logger.error(
                    f"{type(exc).__name__} in transaction; rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                    exc_info=True,
                )
                raise

            except Exception as exc:
                await session.rollback()
                log = logger.error if should_alert(exc) else logger.debug
                log(
                    "Transaction rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                )
                raise

    # ========================================================================
    # Pessimistic Locking Helper
    # ========================================================================

    @classmethod
    async def get_locked_entity(
        cls,
        session: AsyncSession,
        model: Type[T],
        primary_key: Any,
    ) -> Optional[T]:
        """
        Fetch an entity with ``SELECT ... FOR UPDATE``.

        Must be called inside ``get_transaction()``; the lock is held until
        the transaction ends. SQLite drops the clause; there the whole
        transaction already holds the database write lock because it was
        opened with ``BEGIN IMMEDIATE``.
        """
        return await session.get(model, primary_key, with_for_update=True)
