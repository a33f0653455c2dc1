"""
Database Model Enums
====================

Categorical values stored in string columns. Services validate caller input
against these before writing; the columns themselves store ``.value``.
"""

from __future__ import annotations

import enum


class GuildRole(str, enum.Enum):
    """Rank within the guild, highest first."""

    GUILD_MASTER = "guild_master"
    VICE_GUILD_MASTER = "vice_guild_master"
    SENIOR_GUILD_MEMBER = "senior_guild_member"
    MEMBER = "member"
    RECRUIT = "recruit"


class TreasuryStatus(str, enum.Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"
    EXEMPT = "exempt"


class SuggestionStatus(str, enum.Enum):
    """Officer-controlled lifecycle of a suggestion; votes do not change it."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IMPLEMENTED = "implemented"


class ReviewStatus(str, enum.Enum):
    """Officer review state of recruitment applications and guides."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def decisions(cls) -> tuple["ReviewStatus", ...]:
        """States a review may move an item to."""
        return (cls.APPROVED, cls.REJECTED)


class EventStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class VoteType(str, enum.Enum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def counter_attr(self) -> str:
        """Name of the Suggestion counter column this vote type feeds."""
        return "upvotes" if self is VoteType.UPVOTE else "downvotes"


class DragonNestJob(str, enum.Enum):
    """Final-advancement classes, grouped by base class."""

    # Warrior
    GLADIATOR = "gladiator"
    MOONLORD = "moonlord"
    BARBARIAN = "barbarian"
    DESTROYER = "destroyer"
    MYSTIC_KNIGHT = "mystic_knight"
    GRAND_MASTER = "grand_master"
    # Cleric
    GUARDIAN = "guardian"
    CRUSADER = "crusader"
    SAINT = "saint"
    INQUISITOR = "inquisitor"
    # Archer
    SNIPER = "sniper"
    ARTILLERY = "artillery"
    TEMPEST = "tempest"
    WIND_WALKER = "wind_walker"
    # Sorceress
    SALEANA = "saleana"
    ELESTRA = "elestra"
    SMASHER = "smasher"
    MAJESTY = "majesty"
    # Tinkerer
    SHOOTING_STAR = "shooting_star"
    GEAR_MASTER = "gear_master"
    ADEPT = "adept"
    PHYSICIAN = "physician"
    # Kali
    DARK_SUMMONER = "dark_summoner"
    SOUL_EATER = "soul_eater"
    BLADE_DANCER = "blade_dancer"
    SPIRIT_DANCER = "spirit_dancer"
    # Assassin
    RIPPER = "ripper"
    RAVEN = "raven"
    LIGHT_FURY = "light_fury"
    ABYSS_WALKER = "abyss_walker"
    # Lencea
    FLURRY = "flurry"
    STING_BREEZER = "sting_breezer"
    AVALANCHE = "avalanche"
    RANDGRID = "randgrid"
    # Machina
    DEFENSIO = "defensio"
    RUINA = "ruina"
    IMPACTOR = "impactor"
    LUSTER = "luster"
    # Vandar
    DUELIST = "duelist"
    TRICKSTER = "trickster"
    REVENANT = "revenant"
    MAVERICK = "maverick"
