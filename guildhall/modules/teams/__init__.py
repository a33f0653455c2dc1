"""
Teams Module
============

Exports:
- TeamService: Team creation, capacity-gated joining and listings
"""

from .records import MembershipRecord, TeamRecord
from .service import TEAM_ADMISSION, TeamService

__all__ = ["TeamService", "TeamRecord", "MembershipRecord", "TEAM_ADMISSION"]
