"""
Recruitment Module
==================

Exports:
- RecruitmentService: Application submission and officer review
"""

from .records import ApplicationRecord
from .service import RecruitmentService

__all__ = ["RecruitmentService", "ApplicationRecord"]
