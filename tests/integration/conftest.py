"""
Integration fixtures: a real PostgreSQL server via testcontainers.

Overrides the ``database`` fixture so every service fixture from the root
conftest runs against PostgreSQL, where ``SELECT ... FOR UPDATE`` actually
serializes concurrent writers. Skipped when Docker is unavailable.
"""

from __future__ import annotations

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from guildhall.core.config.config import Config
from guildhall.core.database.service import DatabaseService
from guildhall.core.logging.logger import get_logger

logger = get_logger(__name__)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL once for the integration session.

    Scope: session (container persists across all tests)
    """
    logger.info("Starting PostgreSQL testcontainer...")
    container = PostgresContainer(image="postgres:17-alpine", driver="asyncpg")
    try:
        container.start()
    except Exception as exc:  # Docker missing or unreachable
        pytest.skip(f"PostgreSQL testcontainer unavailable: {exc}")

    logger.info("PostgreSQL testcontainer started")
    yield container

    logger.info("Stopping PostgreSQL testcontainer...")
    container.stop()


@pytest_asyncio.fixture
async def database(
    postgres_container: PostgresContainer, monkeypatch
) -> AsyncGenerator[type, None]:
    """
    Fresh schema on the shared container.

    Scope: function (tables dropped and recreated per test)
    """
    monkeypatch.setattr(Config, "DATABASE_URL", postgres_container.get_connection_url())

    await DatabaseService.initialize()
    await DatabaseService.drop_schema()
    await DatabaseService.create_schema()

    yield DatabaseService

    await DatabaseService.shutdown()
