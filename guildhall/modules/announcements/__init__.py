"""
Announcements Module
====================

Exports:
- AnnouncementService: Posting and the recent-announcements feed
"""

from .records import AnnouncementRecord
from .service import AnnouncementService

__all__ = ["AnnouncementService", "AnnouncementRecord"]
