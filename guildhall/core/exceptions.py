"""
Infrastructure exceptions for Guildhall.

Failures that are not the caller's fault: the database went away, a setting
is unusable, an event could not be handed to the bus. Rule violations such
as "Team is full" are domain errors and live in
``guildhall.modules.shared.exceptions``.

Both families expose ``severity`` so logging code can decide how loud to be
without caring which family an exception came from.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    DEBUG = "debug"
    INFO = "info"  # rejected joins, duplicate votes, bad input
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class GuildhallInfrastructureException(Exception):
    """
    Base for engineering-level failures.

    Subclasses set ``DEFAULT_SEVERITY`` and ``DEFAULT_RETRYABLE``; callers may
    override either per instance. ``error_code`` defaults to the class name.
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details: Dict[str, Any] = dict(details or {})
        self.severity = severity if severity is not None else self.DEFAULT_SEVERITY
        self.is_retryable = (
            self.DEFAULT_RETRYABLE if is_retryable is None else is_retryable
        )

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.error_code}] {self.message}"
        return f"[{self.error_code}] {self.message} | Details: {self.details}"

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for structured logs."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "details": self.details,
        }


class ConfigurationError(GuildhallInfrastructureException):
    """A setting is missing or unusable; raised at startup or on first use."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            error_code="CONFIG_ERROR",
            details={"config_key": config_key, "message": message},
        )


class DatabaseError(GuildhallInfrastructureException):
    """
    A database call failed below the domain layer.

    Wraps the driver or SQLAlchemy exception; the original stays reachable as
    ``original_error`` and ``__cause__``.
    """

    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            f"Database error during {operation}: {original_error}",
            error_code="DATABASE_ERROR",
            details={
                "operation": operation,
                "error_type": type(original_error).__name__,
                "error": str(original_error),
            },
        )


class EventBusError(GuildhallInfrastructureException):
    """The bus refused an event outright. Single listener failures never raise."""

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, event_name: str, reason: str) -> None:
        self.event_name = event_name
        super().__init__(
            f"Event bus error for {event_name}: {reason}",
            error_code="EVENT_BUS_ERROR",
            details={"event_name": event_name, "reason": reason},
        )


def is_transient_error(exc: Exception) -> bool:
    """Only infrastructure errors can be transient; domain errors never are."""
    return isinstance(exc, GuildhallInfrastructureException) and exc.is_retryable


def get_error_severity(exc: Exception) -> ErrorSeverity:
    severity = getattr(exc, "severity", None)
    return severity if isinstance(severity, ErrorSeverity) else ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
