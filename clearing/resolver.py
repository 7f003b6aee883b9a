"""
Clearing-point resolver.

Walks the sorted books pairwise (i-th cheapest seller against i-th highest
buyer) looking for the first pair that no longer crosses profitably. The
pairs before it trade; the marginal index is the last included position.

Scanning starts at SCAN_START = 1: index 0 is never tested for a cross, so
the smallest rounds always consider at least one matched pair before the
first cross test. Changing this changes which rounds with a single
profitable pair clear.
"""

from dataclasses import dataclass, replace

from clearing.participant import Participant

SCAN_START = 1


@dataclass(frozen=True)
class ClearingResult:
    """
    Where and at what price(s) a round clears.

    Attributes:
        marginal_index: Last 0-based index traded on both books, or None
        sell_price: Price credited to sellers per unit
        buy_price: Price debited from buyers per unit
        quantity: Units traded (filled in by the allocator)
    """

    marginal_index: int | None
    sell_price: float = 0.0
    buy_price: float = 0.0
    quantity: int = 0

    @property
    def has_trade(self) -> bool:
        return self.marginal_index is not None and self.quantity > 0

    @property
    def spread(self) -> float:
        """Per-unit difference retained when buyers pay more than sellers get."""
        return self.buy_price - self.sell_price

    def with_quantity(self, quantity: int) -> "ClearingResult":
        return replace(self, quantity=quantity)


NO_TRADE = ClearingResult(marginal_index=None)


def _midpoint(ask: float, bid: float) -> float:
    # ask + bid can overflow for prices near the float maximum
    return ask + (bid - ask) / 2


def _boundary_pair(
    sellers: list[Participant], buyers: list[Participant], last: int
) -> ClearingResult:
    """
    Clear at the last complete pair when a book runs out before a cross.

    The pair trades at its midpoint if it is still profitable; index 0 is
    never cross-tested by the scan, so it is checked here.
    """
    ask = sellers[last].ask
    bid = buyers[last].bid
    if ask < bid:
        price = _midpoint(ask, bid)
        return ClearingResult(marginal_index=last, sell_price=price, buy_price=price)
    return NO_TRADE


def find_clearing_point(
    sellers: list[Participant], buyers: list[Participant]
) -> ClearingResult:
    """
    Find the marginal index and clearing price(s) of sorted books.

    At the first index i where sellers[i].ask >= buyers[i].bid:

    - If the midpoint of that crossing pair lies strictly between
      sellers[i-1].ask and buyers[i-1].bid, pair i-1 is marginal and both
      sides settle at the midpoint.
    - Otherwise pair i-2 is marginal; sellers receive sellers[i-1].ask and
      buyers pay buyers[i-1].bid, so the spread between them is retained.

    If the shorter book runs out before a cross, its last pair is the
    boundary (see _boundary_pair).

    Args:
        sellers: Sellers sorted ascending by ask
        buyers: Buyers sorted descending by bid

    Returns:
        ClearingResult with quantity 0, or NO_TRADE if nothing can trade
    """
    if not sellers or not buyers:
        return NO_TRADE

    for i in range(SCAN_START, max(len(sellers), len(buyers))):
        if i >= len(sellers) or i >= len(buyers):
            return _boundary_pair(sellers, buyers, i - 1)

        ask, bid = sellers[i].ask, buyers[i].bid
        if ask < bid:
            continue

        mid = _midpoint(ask, bid)
        if sellers[i - 1].ask < mid and mid < buyers[i - 1].bid:
            return ClearingResult(marginal_index=i - 1, sell_price=mid, buy_price=mid)

        if i - 2 < 0:
            return NO_TRADE
        return ClearingResult(
            marginal_index=i - 2,
            sell_price=sellers[i - 1].ask,
            buy_price=buyers[i - 1].bid,
        )

    # Equal-length books with no cross
    return _boundary_pair(sellers, buyers, len(sellers) - 1)
