"""
Officer review decisions shared by recruitment applications and guides.
"""

from __future__ import annotations

from typing import Any

from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import ReviewStatus
from guildhall.modules.shared.exceptions import ValidationError


def validate_decision(status: Any) -> ReviewStatus:
    """Resolve a review outcome; ``pending`` is not a decision."""
    decision = InputValidator.validate_enum(status, "status", ReviewStatus)
    if decision not in ReviewStatus.decisions():
        raise ValidationError("status", "Review status must be approved or rejected")
    return decision
