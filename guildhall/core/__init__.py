"""
Core infrastructure layer for Guildhall.

Purpose
-------
Single import surface for the infrastructure primitives shared by every
domain service:

- Configuration (Config)
- Structured logging (get_logger, LogContext)
- Infrastructure exceptions (GuildhallInfrastructureException hierarchy)

Database, event bus, validation and the service container are imported
from their own subpackages to keep this package free of domain imports.
"""

from guildhall.core.config.config import Config
from guildhall.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    ErrorSeverity,
    EventBusError,
    GuildhallInfrastructureException,
)
from guildhall.core.logging.logger import LogContext, get_logger

__all__ = [
    "Config",
    "get_logger",
    "LogContext",
    "ErrorSeverity",
    "GuildhallInfrastructureException",
    "ConfigurationError",
    "DatabaseError",
    "EventBusError",
]
