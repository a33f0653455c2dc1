"""
TreasuryPayment: a member's proof of paying one treasury fee.
Pure schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, IdMixin, utc_now


class TreasuryPayment(Base, IdMixin):
    """
    Schema-only:
    - user_id (FK to users) / treasury_fee_id (FK to treasury_fees)
    - proof_url (opaque link to a screenshot)
    - submitted_at
    - verified_by / verified_at (unset until an officer verifies)
    """

    __tablename__ = "treasury_payments"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    treasury_fee_id: Mapped[int] = mapped_column(
        ForeignKey("treasury_fees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    proof_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    verified_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), default=None)
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=None
    )
