"""
Read-only records returned by the suggestion board services.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from guildhall.database.models import Suggestion, SuggestionVote


@dataclass(frozen=True, slots=True)
class VoteRecord:
    id: int
    suggestion_id: int
    user_id: int
    vote_type: str
    created_at: datetime

    @classmethod
    def from_model(cls, vote: SuggestionVote) -> "VoteRecord":
        return cls(
            id=vote.id,
            suggestion_id=vote.suggestion_id,
            user_id=vote.user_id,
            vote_type=vote.vote_type,
            created_at=vote.created_at,
        )


@dataclass(frozen=True, slots=True)
class VoteOutcome:
    """
    What a single cast did to the suggestion.

    ``previous_vote_type`` is None for a first vote and the replaced type for
    a switch. ``upvotes``/``downvotes`` are the counters after the cast.
    """

    vote: VoteRecord
    previous_vote_type: Optional[str]
    upvotes: int
    downvotes: int

    @property
    def switched(self) -> bool:
        return self.previous_vote_type is not None


@dataclass(frozen=True, slots=True)
class SuggestionRecord:
    id: int
    title: str
    description: str
    status: str
    upvotes: int
    downvotes: int
    created_by: int
    created_at: datetime
    updated_at: datetime

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @classmethod
    def from_model(cls, suggestion: Suggestion) -> "SuggestionRecord":
        return cls(
            id=suggestion.id,
            title=suggestion.title,
            description=suggestion.description,
            status=suggestion.status,
            upvotes=suggestion.upvotes,
            downvotes=suggestion.downvotes,
            created_by=suggestion.created_by,
            created_at=suggestion.created_at,
            updated_at=suggestion.updated_at,
        )
