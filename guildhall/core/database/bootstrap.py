"""
Database Subsystem Bootstrap

Single entry point for bringing the database layer up and down:

1. ``initialize_database_subsystem()`` initializes DatabaseService, optionally
   creates missing tables and verifies connectivity with a bounded health
   check.
2. ``shutdown_database_subsystem()`` disposes the engine; errors are logged
   and not re-raised so shutdown can continue.
"""

from __future__ import annotations

import asyncio

from guildhall.core.database.service import DatabaseInitializationError, DatabaseService
from guildhall.core.logging.logger import get_logger

logger = get_logger(__name__)

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0


async def initialize_database_subsystem(
    *,
    verify_health: bool = True,
    create_schema: bool = False,
) -> None:
    """
    Initialize the database subsystem.

    Parameters
    ----------
    verify_health : bool, default=True
        Run ``SELECT 1`` after initialization, bounded by
        ``HEALTH_CHECK_TIMEOUT_SECONDS``.
    create_schema : bool, default=False
        Create any missing tables. Production deployments manage the schema
        out of band.

    Raises
    ------
    DatabaseInitializationError
        If initialization fails or the health check fails or times out.
    """
    logger.info("Initializing database subsystem")

    await DatabaseService.initialize()

    if create_schema:
        await DatabaseService.create_schema()

    if not verify_health:
        logger.info("Database subsystem initialized (health check skipped)")
        return

    try:
        healthy = await asyncio.wait_for(
            DatabaseService.health_check(),
            timeout=HEALTH_CHECK_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as exc:
        logger.error(
            "Database health check timed out during bootstrap",
            extra={"timeout_seconds": HEALTH_CHECK_TIMEOUT_SECONDS},
        )
        raise DatabaseInitializationError(
            f"Database health check timed out after {HEALTH_CHECK_TIMEOUT_SECONDS}s"
        ) from exc

    if not healthy:
        logger.error("Database health check failed during bootstrap")
        raise DatabaseInitializationError(
            "Database is unreachable or unhealthy after initialization"
        )

    logger.info("Database subsystem initialized and healthy")


async def shutdown_database_subsystem() -> None:
    """Dispose the engine. Never raises."""
    logger.info("Shutting down database subsystem")

    try:
        await DatabaseService.shutdown()
    except Exception as exc:
        logger.error(
            "Error during database subsystem shutdown",
            extra={"error": str(exc), "error_type": type(exc).__name__},
            exc_info=True,
        )
        return

    logger.info("Database subsystem shutdown complete")
