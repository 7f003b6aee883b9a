"""Round reconciler: merge the books back and derive filled quantities."""

from typing import Sequence

from clearing.participant import Participant


def merge_back(sellers: list[Participant], buyers: list[Participant]) -> list[Participant]:
    """
    Merge both books into one list ordered by participant id.

    The sort is stable and keyed only on id, so merging already-merged books
    again yields the same order.
    """
    merged = sellers + buyers
    merged.sort(key=lambda p: p.id)
    return merged


def reconcile(
    before: Sequence[Participant],
    sellers: list[Participant],
    buyers: list[Participant],
) -> list[Participant]:
    """
    Build the round's final state.

    Args:
        before: Untouched pre-round snapshot
        sellers: Settled seller book
        buyers: Settled buyer book

    Returns:
        Participants ordered by id with filled_quantity set from the
        snapshot (matched by id, not by position)
    """
    original_quantity = {p.id: p.quantity for p in before}

    merged = merge_back(sellers, buyers)
    for participant in merged:
        participant.filled_quantity = original_quantity[participant.id] - participant.quantity
    return merged
