"""
Guildhall Logging Infrastructure

Exports the structured logging subsystem and log context helpers:
- JSON or colored console output through a non-blocking queue
- ContextVar-based contextual logging (`LogContext`)
- Setup and teardown helpers for the global logging system
"""

from guildhall.core.logging.logger import (
    LogContext,
    LoggerConfig,
    clear_log_context,
    get_log_context,
    get_logger,
    get_logging_health,
    set_log_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LogContext",
    "LoggerConfig",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "get_logging_health",
    "set_log_context",
    "setup_logging",
    "shutdown_logging",
]
