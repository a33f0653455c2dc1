"""
Users Module
============

Exports:
- UserService: Member registration, lookup and roster updates
"""

from .records import UserRecord
from .service import UserService

__all__ = ["UserService", "UserRecord"]
