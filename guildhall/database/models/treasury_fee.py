"""
TreasuryFee: the weekly guild fee set by an officer.
Pure schema.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from guildhall.core.database.base import Base, CreatedAtMixin, IdMixin


class TreasuryFee(Base, IdMixin, CreatedAtMixin):
    """
    Schema-only:
    - amount (NUMERIC(10, 2), strictly positive)
    - week_start / week_end (inclusive calendar dates)
    - set_by (FK to users)

    Fee periods may overlap; the newest fee covering a date wins.
    """

    __tablename__ = "treasury_fees"
    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        CheckConstraint("week_end >= week_start", name="week_ordered"),
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    week_start: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    week_end: Mapped[date] = mapped_column(Date, nullable=False)
    set_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
