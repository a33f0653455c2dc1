"""
Database Models Package
=======================

SQLAlchemy ORM models for Guildhall, one table per module.

All models:
- are schema-only, with no business logic
- use Mapped[] syntax with mapped_column()
- compose mixins from guildhall.core.database.base
- store enum values as strings (see enums.py)

Importing this package registers every table on ``Base.metadata``.
"""

from guildhall.core.database.base import Base

from .announcement import Announcement
from .character import Character
from .enums import (
    DragonNestJob,
    EventStatus,
    GuildRole,
    ReviewStatus,
    SuggestionStatus,
    TreasuryStatus,
    VoteType,
)
from .event import Event
from .event_registration import EventRegistration
from .gallery_image import GalleryImage
from .guide import Guide
from .recruitment_application import RecruitmentApplication
from .suggestion import Suggestion
from .suggestion_vote import SuggestionVote
from .team import Team
from .team_member import TeamMember
from .treasury_fee import TreasuryFee
from .treasury_payment import TreasuryPayment
from .user import User

__all__ = [
    "Base",
    # Roster
    "User",
    "Character",
    # Teams & events
    "Team",
    "TeamMember",
    "Event",
    "EventRegistration",
    # Suggestion board
    "Suggestion",
    "SuggestionVote",
    # Officer workflows
    "RecruitmentApplication",
    "Guide",
    # Treasury
    "TreasuryFee",
    "TreasuryPayment",
    # Dashboard
    "Announcement",
    "GalleryImage",
    # Enums
    "GuildRole",
    "TreasuryStatus",
    "SuggestionStatus",
    "ReviewStatus",
    "EventStatus",
    "VoteType",
    "DragonNestJob",
]
