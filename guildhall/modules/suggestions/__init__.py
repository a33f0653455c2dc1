"""
Suggestions Module
==================

Member suggestion board and voting.

Exports:
- SuggestionService: Suggestion CRUD and status workflow
- SuggestionVoteLedger: Vote casting with vote switching and counters
"""

from .records import SuggestionRecord, VoteOutcome, VoteRecord
from .service import SuggestionService
from .vote_ledger import SuggestionVoteLedger

__all__ = [
    "SuggestionService",
    "SuggestionVoteLedger",
    "SuggestionRecord",
    "VoteRecord",
    "VoteOutcome",
]
