"""
Guides Module
=============

Exports:
- GuideService: Guide submission, review queue and published list
"""

from .records import GuideRecord
from .service import GuideService

__all__ = ["GuideService", "GuideRecord"]
