"""
clearing - Batch Double-Auction Clearing Engine

This package contains the deterministic clearing pipeline for discrete batch
auctions where every participant submits exactly one ask or one bid.

Modules:
    participant: The Participant record (one side, price, quantity, balance)
    book: Splitting a round into seller/buyer books and sorting them
    resolver: Finding the marginal index and clearing price(s)
    allocator: Tradable quantity at the clearing point
    settlement: Partial fills and balance updates
    reconciler: Merging the books back and deriving filled quantities
    invariants: Cross-round conservation checks
    auction: The round pipeline tying the stages together
"""

from clearing.auction import RoundOutcome, run_round
from clearing.errors import ClearingError, InvariantViolationError, MalformedOrderError
from clearing.invariants import InvariantChecker
from clearing.participant import Participant, Side
from clearing.resolver import NO_TRADE, SCAN_START, ClearingResult

__version__ = "1.0.0"

__all__ = [
    "ClearingError",
    "ClearingResult",
    "InvariantChecker",
    "InvariantViolationError",
    "MalformedOrderError",
    "NO_TRADE",
    "Participant",
    "RoundOutcome",
    "SCAN_START",
    "Side",
    "run_round",
]
