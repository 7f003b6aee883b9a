"""
Settlement engine: partial fills and balance updates.

Both sides are filled independently against their own counter, each
initialised to the round's tradable quantity Q. Walking a book in sorted
order, every participant takes min(own quantity, what is left of Q); once the
counter reaches zero the remaining participants are untouched. This yields
full fills first and at most one partial fill per side.

Balances move by the filled units times the side's clearing price, computed
from a quantity snapshot taken before any fill is applied.
"""

import logging
from dataclasses import dataclass

from clearing.participant import Participant
from clearing.resolver import ClearingResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementSnapshot:
    """Quantities of book[0..=m] on both sides before settlement."""

    seller_quantities: tuple[int, ...]
    buyer_quantities: tuple[int, ...]


def snapshot_quantities(
    sellers: list[Participant], buyers: list[Participant], marginal_index: int
) -> SettlementSnapshot:
    """Copy the pre-settlement quantities of the traded range."""
    end = marginal_index + 1
    return SettlementSnapshot(
        seller_quantities=tuple(p.quantity for p in sellers[:end]),
        buyer_quantities=tuple(p.quantity for p in buyers[:end]),
    )


def fill_book(book: list[Participant], marginal_index: int, quantity: int) -> int:
    """
    Deduct up to ``quantity`` units from book[0..=marginal_index] in order.

    Args:
        book: Sorted book (mutated)
        marginal_index: Last index eligible for a fill
        quantity: Units to allocate on this side

    Returns:
        Units left unallocated (0 unless the range could not absorb them)
    """
    remaining = quantity
    for participant in book[: marginal_index + 1]:
        if remaining <= 0:
            break
        fill = min(participant.quantity, remaining)
        participant.quantity -= fill
        remaining -= fill
    return remaining


def settle(
    sellers: list[Participant],
    buyers: list[Participant],
    clearing: ClearingResult,
) -> SettlementSnapshot | None:
    """
    Apply a clearing result to the books.

    Args:
        sellers: Sorted seller book (mutated)
        buyers: Sorted buyer book (mutated)
        clearing: Result carrying marginal index, prices and quantity

    Returns:
        The pre-settlement snapshot, or None when nothing traded
    """
    if not clearing.has_trade:
        return None

    m = clearing.marginal_index
    snapshot = snapshot_quantities(sellers, buyers, m)

    unfilled_buy = fill_book(buyers, m, clearing.quantity)
    unfilled_sell = fill_book(sellers, m, clearing.quantity)
    if unfilled_buy or unfilled_sell:
        # The allocator never hands out more than either side holds
        logger.warning(
            f"Unallocated units after settlement: buy={unfilled_buy} sell={unfilled_sell}"
        )

    for participant, before in zip(sellers, snapshot.seller_quantities):
        participant.balance += (before - participant.quantity) * clearing.sell_price

    for participant, before in zip(buyers, snapshot.buyer_quantities):
        participant.balance -= abs(participant.quantity - before) * clearing.buy_price

    logger.debug(
        f"Settled {clearing.quantity} units over indices 0..{m} "
        f"(sell @ {clearing.sell_price}, buy @ {clearing.buy_price})"
    )
    return snapshot
