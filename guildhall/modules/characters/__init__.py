"""
Characters Module
=================

Exports:
- CharacterService: Character creation, listing and updates
"""

from .records import CharacterRecord
from .service import CharacterService

__all__ = ["CharacterService", "CharacterRecord"]
