"""
TreasuryService - weekly guild fees and payment proofs
======================================================

Handles:
- Officers setting the fee for a week
- Looking up the fee in force on a given day
- Members submitting proof of payment
- Officers verifying a submitted payment

A fee covers ``week_start`` through ``week_end`` inclusive. When periods
overlap, the most recently created fee wins. Proof URLs are opaque strings.
Verifying a payment does not change the member's ``treasury_status``;
officers set that through UserService.update_user.

Events:
- treasury.fee_created
- treasury.payment_submitted
- treasury.payment_verified
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional, Type

from guildhall.core.database.base import utc_now
from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import TreasuryFee, TreasuryPayment, User
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import FEE_AMOUNT_MAX, FEE_AMOUNT_PLACES, URL_MAX_LENGTH
from guildhall.modules.shared.exceptions import ConflictError, NotFoundError, ValidationError
from guildhall.modules.treasury.records import FeeRecord, PaymentRecord

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class TreasuryService(BaseService):
    """Treasury fee schedule and payment proofs."""

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._fee_repo = BaseRepository[TreasuryFee](TreasuryFee, self.log)
        self._payment_repo = BaseRepository[TreasuryPayment](TreasuryPayment, self.log)
        self._user_repo = BaseRepository[User](User, self.log)

    # =========================================================================
    # FEES
    # =========================================================================

    async def create_fee(
        self,
        amount: Any,
        week_start: Any,
        week_end: Any,
        set_by: int,
    ) -> FeeRecord:
        """
        Set the fee for a period.

        Raises:
            ValidationError: Non-positive amount, more than 2 decimals, bad dates,
                or week_end before week_start
            NotFoundError: Officer does not exist
        """
        amount = InputValidator.validate_amount(
            amount, "amount", places=FEE_AMOUNT_PLACES, max_value=Decimal(FEE_AMOUNT_MAX)
        )
        week_start = InputValidator.validate_date(week_start, "week_start")
        week_end = InputValidator.validate_date(week_end, "week_end")
        if week_end < week_start:
            raise ValidationError("week_end", "Must not be before week_start")
        set_by = InputValidator.validate_id(set_by, "set_by")

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == set_by):
                raise NotFoundError("User", set_by, message="User not found")

            fee = self._fee_repo.add(
                session,
                TreasuryFee(
                    amount=amount,
                    week_start=week_start,
                    week_end=week_end,
                    set_by=set_by,
                ),
            )
            await self._fee_repo.flush(session)
            record = FeeRecord.from_model(fee)

        self.log_operation(
            "create_fee",
            fee_id=record.id,
            amount=str(amount),
            week_start=week_start.isoformat(),
            week_end=week_end.isoformat(),
        )
        await self.emit_event(
            "treasury.fee_created",
            {
                "fee_id": record.id,
                "amount": str(amount),
                "week_start": week_start.isoformat(),
                "week_end": week_end.isoformat(),
                "set_by": set_by,
            },
        )
        return record

    async def get_current_fee(self, on: Optional[Any] = None) -> Optional[FeeRecord]:
        """
        The fee covering ``on`` (default: today in UTC), or None.

        Overlapping periods resolve to the newest fee.
        """
        day = InputValidator.validate_date(on, "on") if on is not None else utc_now().date()

        async with DatabaseService.get_session() as session:
            fees = await self._fee_repo.find_many_where(
                session,
                TreasuryFee.week_start <= day,
                TreasuryFee.week_end >= day,
                order_by=(TreasuryFee.created_at.desc(), TreasuryFee.id.desc()),
                limit=1,
            )
            return FeeRecord.from_model(fees[0]) if fees else None

    async def get_fee(self, fee_id: int) -> FeeRecord:
        fee_id = InputValidator.validate_id(fee_id, "fee_id")

        async with DatabaseService.get_session() as session:
            fee = await self._fee_repo.get(session, fee_id)
            if fee is None:
                raise NotFoundError("TreasuryFee", fee_id, message=f"Treasury fee {fee_id} not found")
            return FeeRecord.from_model(fee)

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    async def submit_payment(
        self,
        user_id: int,
        treasury_fee_id: int,
        proof_url: str,
    ) -> PaymentRecord:
        """
        Record a member's proof of payment, unverified.

        Raises:
            ValidationError: Malformed ids or empty/oversized proof URL
            NotFoundError: User or fee does not exist
        """
        user_id = InputValidator.validate_id(user_id, "user_id")
        treasury_fee_id = InputValidator.validate_id(treasury_fee_id, "treasury_fee_id")
        proof_url = InputValidator.validate_string(
            proof_url, "proof_url", min_length=1, max_length=URL_MAX_LENGTH
        )

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == user_id):
                raise NotFoundError("User", user_id, message=f"User with id {user_id} not found")
            if not await self._fee_repo.exists(session, TreasuryFee.id == treasury_fee_id):
                raise NotFoundError(
                    "TreasuryFee",
                    treasury_fee_id,
                    message=f"Treasury fee {treasury_fee_id} not found",
                )

            payment = self._payment_repo.add(
                session,
                TreasuryPayment(
                    user_id=user_id,
                    treasury_fee_id=treasury_fee_id,
                    proof_url=proof_url,
                ),
            )
            await self._payment_repo.flush(session)
            record = PaymentRecord.from_model(payment)

        self.log_operation(
            "submit_payment", payment_id=record.id, user_id=user_id, fee_id=treasury_fee_id
        )
        await self.emit_event(
            "treasury.payment_submitted",
            {"payment_id": record.id, "user_id": user_id, "fee_id": treasury_fee_id},
        )
        return record

    async def verify_payment(self, payment_id: int, verified_by: int) -> PaymentRecord:
        """
        Mark a submitted payment as checked by an officer.

        Raises:
            NotFoundError: Payment or officer does not exist
            ConflictError: Payment was already verified
        """
        payment_id = InputValidator.validate_id(payment_id, "payment_id")
        verified_by = InputValidator.validate_id(verified_by, "verified_by")

        async with DatabaseService.get_transaction() as session:
            payment = await self._payment_repo.get_for_update(session, payment_id)
            if payment is None:
                raise NotFoundError(
                    "TreasuryPayment", payment_id, message=f"Payment {payment_id} not found"
                )
            if payment.verified_at is not None:
                raise ConflictError(
                    "verify_payment",
                    "Payment has already been verified",
                    details={"payment_id": payment_id, "verified_by": payment.verified_by},
                )
            if not await self._user_repo.exists(session, User.id == verified_by):
                raise NotFoundError("User", verified_by, message="Verifier not found")

            payment.verified_by = verified_by
            payment.verified_at = utc_now()
            await self._payment_repo.flush(session)
            record = PaymentRecord.from_model(payment)

        self.log_operation("verify_payment", payment_id=payment_id, verified_by=verified_by)
        await self.emit_event(
            "treasury.payment_verified",
            {"payment_id": payment_id, "user_id": record.user_id, "verified_by": verified_by},
        )
        return record

    async def get_payments_for_fee(self, treasury_fee_id: int) -> List[PaymentRecord]:
        """Payments against one fee, in submission order."""
        treasury_fee_id = InputValidator.validate_id(treasury_fee_id, "treasury_fee_id")

        async with DatabaseService.get_session() as session:
            payments = await self._payment_repo.find_many_where(
                session,
                TreasuryPayment.treasury_fee_id == treasury_fee_id,
                order_by=(TreasuryPayment.submitted_at, TreasuryPayment.id),
            )
            return [PaymentRecord.from_model(p) for p in payments]
