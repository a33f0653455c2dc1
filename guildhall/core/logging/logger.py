"""
Guildhall Logging Subsystem

Purpose
-------
Async-safe structured logging for the Guildhall service layer:

- JSON log lines for aggregation (production default).
- Colored human-readable console output for local development.
- ContextVar-based propagation of operation context (actor, resource,
  correlation id) into every record emitted while the context is active.
- QueueHandler + QueueListener so handler I/O never blocks the event loop.
- Rotating JSON file sink under ``Config.LOGS_DIR`` as a local backup.

Responsibilities
----------------
- Configure the root logger once per process (idempotent).
- Enrich records with ``actor_id``, ``resource``, ``operation``,
  ``component`` and ``correlation_id``.
- Merge ``extra={...}`` fields into the JSON payload.
- Expose a small health snapshot (queue depth, dropped records).

Non-Responsibilities
--------------------
- Metrics, tracing or alert routing.
- Deciding what to log; services and repositories own that.

Dependencies
------------
- guildhall.core.config.config.Config
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from guildhall.core.config.config import Config


# ============================================================================
# Operation Context (ContextVars)
# ============================================================================

_operation_context: ContextVar[Dict[str, Any]] = ContextVar(
    "operation_context",
    default={},
)


# ============================================================================
# Config / Environment
# ============================================================================


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Formatting and sink settings; level and format flags are read from Config."""

    CONSOLE_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"
    DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    DAILY_BASENAME: str = "guildhall.json.log"
    DAILY_BACKUP_COUNT: int = 2

    QUEUE_MAX_SIZE: int = 10_000

    @property
    def environment(self) -> str:
        return str(getattr(Config, "ENVIRONMENT", "development")).lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def logs_dir(self) -> Path:
        return Path(Config.LOGS_DIR).resolve()

    @property
    def log_level(self) -> int:
        level_name = getattr(Config, "LOG_LEVEL", "INFO")
        if not isinstance(level_name, str):
            level_name = "INFO"
        return getattr(logging, level_name.upper(), logging.INFO)

    @property
    def use_json(self) -> bool:
        json_flag = getattr(Config, "LOG_JSON", None)
        if json_flag is None:
            return self.is_production
        return bool(json_flag)

    @property
    def use_colors(self) -> bool:
        if self.use_json:
            return False
        return bool(getattr(Config, "LOG_COLORS", True)) and sys.stdout.isatty()


LOGGER_CONFIG = LoggerConfig()


# ============================================================================
# Health
# ============================================================================


@dataclass(slots=True)
class _QueueCounters:
    enqueued: int = 0
    dropped: int = 0
    handler_errors: int = 0


@dataclass(frozen=True, slots=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    handler_errors: int


_counters = _QueueCounters()
_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_queue_listener: Optional[QueueListener] = None


# ============================================================================
# Filters & Formatters
# ============================================================================

_CONTEXT_FIELDS = ("actor_id", "resource", "operation", "component", "correlation_id")


class ContextFilter(logging.Filter):
    """Copies the active operation context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _operation_context.get({})

        record.actor_id = context.get("actor_id", "N/A")
        record.resource = context.get("resource", "N/A")
        record.operation = context.get("operation", "N/A")
        record.correlation_id = context.get("correlation_id", "N/A")
        record.component = context.get("component") or record.name.split(".")[-1]

        for key, value in context.items():
            if key not in _CONTEXT_FIELDS and not hasattr(record, key):
                setattr(record, key, value)

        return True


class ColoredFormatter(logging.Formatter):
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        original = record.levelname
        color = self.COLORS.get(original)
        if color:
            record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """One JSON object per line; non-standard record attributes land in ``extra``."""

    _RESERVED = set(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "N/A"):
                payload[field] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._RESERVED
            and key not in _CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, ensure_ascii=False, default=str)


# ============================================================================
# Queue Handler & Listener
# ============================================================================


class GuildhallQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _counters.enqueued += 1
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _counters.dropped += 1
            sys.stderr.write("Guildhall logging queue full; dropping log record.\n")


class GuildhallQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _counters.handler_errors += 1
        sys.stderr.write("Guildhall logging handler failed to emit a record.\n")


# ============================================================================
# Global Setup
# ============================================================================


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(LOGGER_CONFIG.log_level)

    if LOGGER_CONFIG.use_json:
        handler.setFormatter(JSONFormatter())
    elif LOGGER_CONFIG.use_colors:
        handler.setFormatter(
            ColoredFormatter(LOGGER_CONFIG.CONSOLE_FORMAT, LOGGER_CONFIG.DATE_FORMAT)
        )
    else:
        handler.setFormatter(
            logging.Formatter(LOGGER_CONFIG.CONSOLE_FORMAT, LOGGER_CONFIG.DATE_FORMAT)
        )
    return handler


def _build_file_handler() -> logging.Handler:
    LOGGER_CONFIG.logs_dir.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(
        filename=str(LOGGER_CONFIG.logs_dir / LOGGER_CONFIG.DAILY_BASENAME),
        when="midnight",
        backupCount=LOGGER_CONFIG.DAILY_BACKUP_COUNT,
        encoding="utf-8",
        utc=True,
    )
    handler.setLevel(LOGGER_CONFIG.log_level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Install the queue-backed root handler. Safe to call repeatedly."""
    global _queue_listener, _log_queue, _counters

    root = logging.getLogger()
    if getattr(root, "_guildhall_logging_initialized", False):
        return

    _counters = _QueueCounters()

    root.setLevel(LOGGER_CONFIG.log_level)
    for handler in list(root.handlers):
        if isinstance(handler, GuildhallQueueHandler):
            root.removeHandler(handler)

    _log_queue = queue.Queue(LOGGER_CONFIG.QUEUE_MAX_SIZE)
    _queue_listener = GuildhallQueueListener(
        _log_queue,
        _build_console_handler(),
        _build_file_handler(),
        respect_handler_level=True,
    )
    _queue_listener.start()

    queue_handler = GuildhallQueueHandler(_log_queue)
    queue_handler.setLevel(LOGGER_CONFIG.log_level)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if Config.DATABASE_ECHO else logging.WARNING
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    setattr(root, "_guildhall_logging_initialized", True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": LOGGER_CONFIG.environment,
            "log_level": logging.getLevelName(LOGGER_CONFIG.log_level),
            "json": LOGGER_CONFIG.use_json,
            "logs_dir": str(LOGGER_CONFIG.logs_dir),
        },
    )


def shutdown_logging() -> None:
    """Drain the queue, stop the listener and detach the root handler."""
    global _queue_listener, _log_queue

    root = logging.getLogger()
    if not getattr(root, "_guildhall_logging_initialized", False):
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem")

    if _queue_listener is not None:
        _queue_listener.stop()
        for handler in _queue_listener.handlers:
            handler.flush()
            handler.close()
        _queue_listener = None

    for handler in list(root.handlers):
        if isinstance(handler, GuildhallQueueHandler):
            root.removeHandler(handler)

    setattr(root, "_guildhall_logging_initialized", False)
    _log_queue = None


def get_logging_health() -> LoggingHealth:
    queue_size = _log_queue.qsize() if _log_queue is not None else 0
    max_size = _log_queue.maxsize if _log_queue is not None else 0

    return LoggingHealth(
        initialized=bool(getattr(logging.getLogger(), "_guildhall_logging_initialized", False)),
        queue_size=queue_size,
        queue_max_size=max_size,
        records_enqueued=_counters.enqueued,
        records_dropped=_counters.dropped,
        handler_errors=_counters.handler_errors,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scoped operation context, usable as a sync or async context manager.

    Example
    -------
    >>> async with LogContext(actor_id=7, operation="join_team", resource="team:3"):
    ...     await team_service.join_team(3, 7)
    """

    def __init__(
        self,
        actor_id: Optional[int] = None,
        operation: Optional[str] = None,
        resource: Optional[str] = None,
        component: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        parent = _operation_context.get({})
        self.context: Dict[str, Any] = {
            **parent,
            "correlation_id": correlation_id
            or parent.get("correlation_id")
            or uuid.uuid4().hex[:8],
            **extra,
        }
        if actor_id is not None:
            self.context["actor_id"] = str(actor_id)
        if operation is not None:
            self.context["operation"] = operation
        if resource is not None:
            self.context["resource"] = resource
        if component is not None:
            self.context["component"] = component

        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _operation_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _operation_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def set_log_context(**fields: Any) -> None:
    """Merge ``fields`` into the current operation context without scoping."""
    current = _operation_context.get({}).copy()
    current.update({k: v for k, v in fields.items() if v is not None})
    _operation_context.set(current)


def get_log_context() -> Dict[str, Any]:
    return dict(_operation_context.get({}))


def clear_log_context() -> None:
    _operation_context.set({})


# Initialize logging automatically
setup_logging()
