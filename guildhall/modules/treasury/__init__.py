"""
Treasury Module
===============

Exports:
- TreasuryService: Weekly fee schedule, payment proofs and verification
"""

from .records import FeeRecord, PaymentRecord
from .service import TreasuryService

__all__ = ["TreasuryService", "FeeRecord", "PaymentRecord"]
