"""
Input Validation Layer for Guildhall

Purpose
-------
Single place for low-level input checks on every service entry point: ids,
bounded integers, string lengths, enum choices and datetimes. Services call
these before opening a transaction so malformed input never reaches the
store.

Responsibilities
----------------
- Convert and bounds-check integers (ids, capacities)
- Enforce string length limits (names, titles, descriptions, tag lists)
- Parse money amounts and calendar dates
- Resolve enum values (vote type, job, role, status)
- Raise ValidationError with a user-friendly message

Non-Responsibilities
--------------------
- Business rules such as capacity or duplicate membership (services)
- Existence checks (services, inside the transaction)

Observability
-------------
Every failure is logged at debug level with field_name, raw_value and reason.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, NoReturn, Optional, Type, TypeVar

from guildhall.core.logging.logger import get_logger
from guildhall.modules.shared.exceptions import ValidationError

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


def _raise_validation_error(field_name: str, value: Any, message: str) -> NoReturn:
    """Log and raise a ValidationError."""
    logger.debug(
        "Input validation failed",
        extra={"field_name": field_name, "raw_value": repr(value), "reason": message},
    )
    raise ValidationError(field_name, message)


class InputValidator:
    """
    Stateless input validation. Every method returns the validated value or
    raises ValidationError.
    """

    # =========================================================================
    # INTEGER VALIDATION
    # =========================================================================

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> int:
        """
        Validate and convert value to integer with optional inclusive bounds.

        Booleans are rejected even though ``bool`` subclasses ``int``.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if isinstance(value, bool):
            _raise_validation_error(field_name, value, f"Must be a whole number, got '{value}'")

        try:
            int_value = int(value)
        except (ValueError, TypeError, OverflowError):
            _raise_validation_error(field_name, value, f"Must be a whole number, got '{value}'")

        if isinstance(value, float) and value != int_value:
            _raise_validation_error(field_name, value, f"Must be a whole number, got '{value}'")

        if min_value is not None and int_value < min_value:
            _raise_validation_error(
                field_name, int_value, f"Must be at least {min_value}, got {int_value}"
            )

        if max_value is not None and int_value > max_value:
            _raise_validation_error(
                field_name, int_value, f"Cannot exceed {max_value}, got {int_value}"
            )

        return int_value

    @staticmethod
    def validate_positive_integer(
        value: Any,
        field_name: str,
        max_value: Optional[int] = None,
    ) -> int:
        return InputValidator.validate_integer(value, field_name, min_value=1, max_value=max_value)

    @staticmethod
    def validate_id(value: Any, field_name: str) -> int:
        """Validate a database id (positive 32-bit integer)."""
        return InputValidator.validate_positive_integer(value, field_name, max_value=2**31 - 1)

    # =========================================================================
    # STRING VALIDATION
    # =========================================================================

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> str:
        """
        Validate a string; surrounding whitespace is stripped before the
        length checks.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if not isinstance(value, str):
            _raise_validation_error(field_name, value, "Must be text")

        str_value = value.strip()

        if min_length is not None and len(str_value) < min_length:
            _raise_validation_error(
                field_name, str_value, f"Must be at least {min_length} characters"
            )

        if max_length is not None and len(str_value) > max_length:
            _raise_validation_error(
                field_name, str_value, f"Cannot exceed {max_length} characters"
            )

        return str_value

    @staticmethod
    def validate_optional_string(
        value: Any,
        field_name: str,
        max_length: Optional[int] = None,
    ) -> Optional[str]:
        """Like validate_string, but None and blank strings become None."""
        if value is None:
            return None
        str_value = InputValidator.validate_string(value, field_name, max_length=max_length)
        return str_value or None

    @staticmethod
    def validate_string_list(
        values: Any,
        field_name: str,
        max_count: Optional[int] = None,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> List[str]:
        """
        Validate a list of short strings (tags). Each item is stripped and
        length-checked; errors name the offending index.
        """
        if not isinstance(values, (list, tuple)):
            _raise_validation_error(field_name, values, "Must be a list")

        if max_count is not None and len(values) > max_count:
            _raise_validation_error(
                field_name, values, f"Cannot provide more than {max_count} items"
            )

        validated: List[str] = []
        for idx, raw_value in enumerate(values):
            try:
                validated.append(
                    InputValidator.validate_string(
                        raw_value,
                        f"{field_name}[{idx}]",
                        min_length=min_length,
                        max_length=max_length,
                    )
                )
            except ValidationError as exc:
                _raise_validation_error(
                    field_name, raw_value, f"Item {idx}: {exc.validation_message}"
                )

        return validated

    # =========================================================================
    # CHOICE VALIDATION
    # =========================================================================

    @staticmethod
    def validate_enum(value: Any, field_name: str, enum_cls: Type[E]) -> E:
        """
        Resolve ``value`` (member or raw value, case-insensitive) to a member
        of ``enum_cls``.
        """
        if isinstance(value, enum_cls):
            return value

        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in enum_cls:
                if member.value == normalized:
                    return member

        choices = ", ".join(str(m.value) for m in enum_cls)
        _raise_validation_error(
            field_name, value, f"Invalid choice '{value}'. Must be one of: {choices}"
        )

    # =========================================================================
    # DATETIME VALIDATION
    # =========================================================================

    @staticmethod
    def validate_datetime(value: Any, field_name: str) -> datetime:
        """
        Accept a datetime or an ISO-8601 string.

        The result is always timezone-aware: naive values are taken to be UTC,
        aware values are converted to UTC.
        """
        parsed: Optional[datetime] = None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.strip())
            except ValueError:
                parsed = None

        if parsed is None:
            _raise_validation_error(field_name, value, "Must be a date and time (ISO-8601)")

        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def validate_date(value: Any, field_name: str) -> date:
        """
        Accept a date, a datetime (its UTC calendar date) or a ``YYYY-MM-DD``
        string.
        """
        if isinstance(value, datetime):
            return InputValidator.validate_datetime(value, field_name).date()

        if isinstance(value, date):
            return value

        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                pass

        _raise_validation_error(field_name, value, "Must be a calendar date (YYYY-MM-DD)")

    # =========================================================================
    # MONEY VALIDATION
    # =========================================================================

    @staticmethod
    def validate_amount(
        value: Any,
        field_name: str,
        places: int = 2,
        max_value: Optional[Decimal] = None,
    ) -> Decimal:
        """
        Validate a strictly positive money amount with at most ``places``
        decimal places.

        Floats go through ``str()`` first so 12.5 becomes Decimal("12.5"),
        not its binary expansion.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
            _raise_validation_error(field_name, value, "Must be a number")

        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            _raise_validation_error(field_name, value, f"Must be a number, got '{value}'")

        if not amount.is_finite():
            _raise_validation_error(field_name, value, "Must be a finite number")

        if amount <= 0:
            _raise_validation_error(field_name, value, "Must be greater than 0")

        if amount.as_tuple().exponent < -places:
            _raise_validation_error(
                field_name, value, f"Cannot have more than {places} decimal places"
            )

        if max_value is not None and amount > max_value:
            _raise_validation_error(field_name, value, f"Cannot exceed {max_value}")

        return amount.quantize(Decimal(1).scaleb(-places))
