"""
SuggestionVote: one user's vote on one suggestion.
Pure schema only.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin


class SuggestionVote(Base, IdMixin, CreatedAtMixin):
    """
    Schema-only:
    - suggestion_id / user_id (unique together)
    - vote_type (VoteType value)
    - created_at (time of the latest cast; refreshed when the vote switches)
    """

    __tablename__ = "suggestion_votes"
    __table_args__ = (UniqueConstraint("suggestion_id", "user_id"),)

    suggestion_id: Mapped[int] = mapped_column(
        ForeignKey("suggestions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vote_type: Mapped[str] = mapped_column(String(16), nullable=False)
