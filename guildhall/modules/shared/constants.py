"""
Guildhall Domain Constants

Field-length limits and fixed business values used by input validation and
services. Capacity bounds (team size, event slots) are tunable and live in
``Config`` instead.
"""

from __future__ import annotations

from typing import Final

# ============================================================================
# USERS & CHARACTERS
# ============================================================================

DISCORD_ID_MAX_LENGTH: Final[int] = 32
DISCORD_USERNAME_MAX_LENGTH: Final[int] = 100
URL_MAX_LENGTH: Final[int] = 1024

IGN_MIN_LENGTH: Final[int] = 1
IGN_MAX_LENGTH: Final[int] = 20

# ============================================================================
# TEAMS
# ============================================================================

TEAM_NAME_MIN_LENGTH: Final[int] = 1
TEAM_NAME_MAX_LENGTH: Final[int] = 50
TEAM_DESCRIPTION_MAX_LENGTH: Final[int] = 500

# ============================================================================
# EVENTS & SUGGESTIONS
# ============================================================================

TITLE_MIN_LENGTH: Final[int] = 1
TITLE_MAX_LENGTH: Final[int] = 100
DESCRIPTION_MIN_LENGTH: Final[int] = 1
DESCRIPTION_MAX_LENGTH: Final[int] = 1000

# Event statuses that still accept interest and show on the board
ACTIVE_EVENT_STATUSES: Final[tuple[str, ...]] = ("upcoming", "ongoing")

# ============================================================================
# RECRUITMENT & GUIDES
# ============================================================================

APPLICATION_TEXT_MIN_LENGTH: Final[int] = 50
APPLICATION_TEXT_MAX_LENGTH: Final[int] = 1000

GUIDE_CONTENT_MIN_LENGTH: Final[int] = 100
GUIDE_CONTENT_MAX_LENGTH: Final[int] = 10000

# ============================================================================
# TREASURY
# ============================================================================

# NUMERIC(10, 2)
FEE_AMOUNT_PLACES: Final[int] = 2
FEE_AMOUNT_MAX: Final[str] = "99999999.99"

# ============================================================================
# ANNOUNCEMENTS & GALLERY
# ============================================================================

ANNOUNCEMENT_CONTENT_MAX_LENGTH: Final[int] = 2000
RECENT_ANNOUNCEMENTS_LIMIT: Final[int] = 10

GALLERY_DESCRIPTION_MAX_LENGTH: Final[int] = 500
GALLERY_MAX_TAGS: Final[int] = 10
GALLERY_TAG_MIN_LENGTH: Final[int] = 1
GALLERY_TAG_MAX_LENGTH: Final[int] = 20
GALLERY_DEFAULT_PAGE_SIZE: Final[int] = 10
GALLERY_MAX_PAGE_SIZE: Final[int] = 100
