"""
Guildhall Validation Package

Exposes `InputValidator`, the low-level input checks every service runs
before touching the database.
"""

from guildhall.core.validation.input_validator import InputValidator

__all__ = ["InputValidator"]
