"""
Database subsystem for Guildhall.

Async SQLAlchemy engine, session and transaction management, plus the ORM
base class and mixins used by the models.
"""

from guildhall.core.database.base import (
    Base,
    CreatedAtMixin,
    IdMixin,
    TimestampMixin,
    utc_now,
)
from guildhall.core.database.bootstrap import (
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from guildhall.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    "Base",
    "IdMixin",
    "CreatedAtMixin",
    "TimestampMixin",
    "utc_now",
    "DatabaseService",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
    "initialize_database_subsystem",
    "shutdown_database_subsystem",
]
