"""
Guildhall Shared Module

Domain-level foundations for every module:
- Domain exceptions
- BaseService and BaseRepository
- Field-length constants

Domain layer only; no transport or UI concerns.
"""

from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.exceptions import (
    ConflictError,
    GuildhallDomainException,
    NotFoundError,
    ValidationError,
    is_user_facing,
)

__all__ = [
    "BaseRepository",
    "BaseService",
    "GuildhallDomainException",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "is_user_facing",
]
