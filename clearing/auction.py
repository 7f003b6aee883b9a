"""
Batch double-auction round pipeline.

One call to run_round() clears one discrete round:

    split -> sort -> resolve -> allocate -> settle -> reconcile -> (check)

Each stage completes before the next begins and all state lives in the call:
the input list is deep-copied, the copy is mutated, and the caller's
participants are left untouched as the round's "before" snapshot. Rounds
share nothing, so independent rounds may run concurrently.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence, TYPE_CHECKING

from clearing.allocator import tradable_quantity
from clearing.book import sort_books, split_books
from clearing.errors import MalformedOrderError
from clearing.participant import Participant
from clearing.reconciler import reconcile
from clearing.resolver import ClearingResult, find_clearing_point
from clearing.settlement import settle

if TYPE_CHECKING:
    from clearing.invariants import InvariantChecker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundOutcome:
    """
    Result of clearing one round.

    Attributes:
        round_index: Caller-supplied round number
        before: Pre-round snapshot, in input order
        after: Final participant state, ordered by id
        clearing: Marginal index, prices and traded quantity
    """

    round_index: int
    before: tuple[Participant, ...]
    after: tuple[Participant, ...]
    clearing: ClearingResult

    @property
    def traded_quantity(self) -> int:
        return self.clearing.quantity

    @property
    def spread_revenue(self) -> float:
        """Amount buyers paid beyond what sellers received."""
        return self.clearing.quantity * self.clearing.spread

    def balance_deltas(self) -> dict[int, float]:
        """Map participant id -> balance change this round."""
        opening = {p.id: p.balance for p in self.before}
        return {p.id: p.balance - opening[p.id] for p in self.after}

    def sellers(self) -> list[Participant]:
        return [p for p in self.after if p.is_seller]

    def buyers(self) -> list[Participant]:
        return [p for p in self.after if p.is_buyer]

    def to_records(self) -> list[dict[str, Any]]:
        """One flat dict per participant, for building a DataFrame."""
        deltas = self.balance_deltas()
        opening_quantity = {p.id: p.quantity for p in self.before}
        records = []
        for p in self.after:
            records.append({
                "round": self.round_index,
                "participant_id": p.id,
                "name": p.name,
                "side": p.side.value,
                "price": p.price,
                "quantity": opening_quantity[p.id],
                "remaining_quantity": p.quantity,
                "filled_quantity": p.filled_quantity,
                "balance": p.balance,
                "balance_delta": deltas[p.id],
                "marginal_index": self.clearing.marginal_index,
                "sell_price": self.clearing.sell_price,
                "buy_price": self.clearing.buy_price,
                "traded_quantity": self.clearing.quantity,
            })
        return records


def _check_unique_ids(participants: Sequence[Participant]) -> None:
    seen: set[int] = set()
    for p in participants:
        if p.id in seen:
            raise MalformedOrderError(p.id, "duplicate participant id in round")
        seen.add(p.id)


def run_round(
    participants: Sequence[Participant],
    round_index: int = 0,
    checker: "InvariantChecker | None" = None,
) -> RoundOutcome:
    """
    Clear one round.

    Args:
        participants: The round's orders in generation order (not mutated)
        round_index: Round number recorded on the outcome
        checker: Optional invariant checker run on the outcome

    Returns:
        RoundOutcome with the before/after states and the clearing result

    Raises:
        MalformedOrderError: If any participant is malformed or ids repeat
        InvariantViolationError: If a checker is given and conservation fails
    """
    before = tuple(p.copy() for p in participants)
    _check_unique_ids(before)

    working = [p.copy() for p in before]
    sellers, buyers = split_books(working)
    logger.debug(f"Round {round_index}: {len(sellers)} sellers, {len(buyers)} buyers")

    sort_books(sellers, buyers)

    clearing = find_clearing_point(sellers, buyers)
    clearing = clearing.with_quantity(
        tradable_quantity(sellers, buyers, clearing.marginal_index)
    )

    settle(sellers, buyers, clearing)
    after = reconcile(before, sellers, buyers)

    outcome = RoundOutcome(
        round_index=round_index,
        before=before,
        after=tuple(after),
        clearing=clearing,
    )

    if clearing.has_trade:
        logger.info(
            f"Round {round_index}: cleared {clearing.quantity} units at marginal index "
            f"{clearing.marginal_index} (sell {clearing.sell_price}, buy {clearing.buy_price})"
        )
    else:
        logger.info(f"Round {round_index}: no trade")

    if checker is not None:
        checker.check(outcome)

    return outcome
