"""Tradable quantity at the clearing point."""

from clearing.participant import Participant


def cumulative_quantity(book: list[Participant], marginal_index: int) -> int:
    """Total unfilled quantity over book[0..=marginal_index]."""
    return sum(p.quantity for p in book[: marginal_index + 1])


def tradable_quantity(
    sellers: list[Participant],
    buyers: list[Participant],
    marginal_index: int | None,
) -> int:
    """
    Maximum quantity both sides can absorb at the clearing point.

    Supply and demand are summed independently up to and including the
    marginal index; the smaller sum trades. Participants on the larger side
    are filled in book order, so at most one of them is filled partially.

    Args:
        sellers: Sorted seller book
        buyers: Sorted buyer book
        marginal_index: Last traded index, or None for no trade

    Returns:
        Units traded (0 when there is no marginal index)
    """
    if marginal_index is None or marginal_index < 0:
        return 0

    supply = cumulative_quantity(sellers, marginal_index)
    demand = cumulative_quantity(buyers, marginal_index)
    return min(supply, demand)
