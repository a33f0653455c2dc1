"""
Read-only treasury records. Amounts stay ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from guildhall.database.models import TreasuryFee, TreasuryPayment


@dataclass(frozen=True, slots=True)
class FeeRecord:
    id: int
    amount: Decimal
    week_start: date
    week_end: date
    set_by: int
    created_at: datetime

    def covers(self, day: date) -> bool:
        return self.week_start <= day <= self.week_end

    @classmethod
    def from_model(cls, fee: TreasuryFee) -> "FeeRecord":
        return cls(
            id=fee.id,
            amount=Decimal(fee.amount),
            week_start=fee.week_start,
            week_end=fee.week_end,
            set_by=fee.set_by,
            created_at=fee.created_at,
        )


@dataclass(frozen=True, slots=True)
class PaymentRecord:
    id: int
    user_id: int
    treasury_fee_id: int
    proof_url: str
    submitted_at: datetime
    verified_by: Optional[int]
    verified_at: Optional[datetime]

    @property
    def verified(self) -> bool:
        return self.verified_at is not None

    @classmethod
    def from_model(cls, payment: TreasuryPayment) -> "PaymentRecord":
        return cls(
            id=payment.id,
            user_id=payment.user_id,
            treasury_fee_id=payment.treasury_fee_id,
            proof_url=payment.proof_url,
            submitted_at=payment.submitted_at,
            verified_by=payment.verified_by,
            verified_at=payment.verified_at,
        )
