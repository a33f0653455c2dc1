"""
Suggestion: a member proposal on the voting board.
Pure schema.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, IdMixin, TimestampMixin
from guildhall.database.models.enums import SuggestionStatus


class Suggestion(Base, IdMixin, TimestampMixin):
    """
    Schema-only:
    - title / description
    - status (SuggestionStatus value, default pending)
    - upvotes / downvotes (denormalized totals of suggestion_votes rows)
    - created_by (FK to users)

    The counters are written only by SuggestionVoteLedger, in the same
    transaction as the vote row they account for.
    """

    __tablename__ = "suggestions"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="upvotes_non_negative"),
        CheckConstraint("downvotes >= 0", name="downvotes_non_negative"),
        Index("ix_suggestions_status", "status"),
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SuggestionStatus.PENDING.value
    )
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
