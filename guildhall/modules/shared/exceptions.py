"""
Domain exceptions for Guildhall.

Purpose
-------
Structured, caller-facing exceptions raised by services when a request
violates a business rule: a missing team, a duplicate vote, a full event.
The ``message`` of each exception is safe to show to the end user as-is.

Design Notes
------------
- All domain exceptions inherit from ``GuildhallDomainException``.
- ``message`` is the exact user-facing text; ``details`` carries the
  structured context (ids, counts) for logs.
- Infrastructure failures (``sqlalchemy.exc.IntegrityError`` included) are
  never wrapped into these types; they propagate unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from guildhall.core.exceptions import ErrorSeverity


class GuildhallDomainException(Exception):
    """
    Base exception for all domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise GuildhallDomainException(
        ...     "Team is full",
        ...     {"team_id": 3, "capacity": 5}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.INFO
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}"
            ")"
        )


class NotFoundError(GuildhallDomainException):
    """
    Raised when a referenced entity does not exist.

    Args:
        resource_type: Type of resource (e.g., "Team", "Event", "Suggestion")
        identifier: Optional identifier for the missing resource
        message: Optional override for the default "{type} not found" text
    """

    def __init__(
        self,
        resource_type: str,
        identifier: Optional[Any] = None,
        message: Optional[str] = None,
    ) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if message is None:
            if identifier is not None:
                message = f"{resource_type} not found: {identifier}"
            else:
                message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ConflictError(GuildhallDomainException):
    """
    Raised when a request conflicts with current state: a repeated vote of
    the same type, a second membership, or a full roster.

    The ``reason`` becomes the message verbatim.

    Args:
        action: Short name of the attempted action (e.g., "join_team")
        reason: User-facing explanation of the conflict
        details: Extra structured context for logs
    """

    def __init__(
        self,
        action: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            reason,
            details={"action": action, **(details or {})},
            error_code=f"CONFLICT_{action.upper()}",
        )


class ValidationError(GuildhallDomainException):
    """
    Raised when caller input fails validation (lengths, ranges, enum values).

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


def is_user_facing(exc: Exception) -> bool:
    """True for exceptions whose ``message`` may be shown to the caller."""
    return isinstance(exc, GuildhallDomainException)
