"""
Seller and buyer books for a single round.

A book is a plain list of Participant references (not copies), so settlement
on a book mutates the round's participants directly.
"""

from typing import Sequence

from clearing.participant import Participant


def split_books(
    participants: Sequence[Participant],
) -> tuple[list[Participant], list[Participant]]:
    """
    Partition a round into sellers and buyers.

    Every participant is validated before any is filed, so a malformed
    record rejects the whole round instead of landing in both or neither
    list.

    Args:
        participants: The round's participants in insertion order

    Returns:
        (sellers, buyers), each preserving the round's relative order

    Raises:
        MalformedOrderError: If any participant sets both or neither of ask/bid
    """
    for participant in participants:
        participant.validate()

    sellers = [p for p in participants if p.is_seller]
    buyers = [p for p in participants if p.is_buyer]
    return sellers, buyers


def sort_books(sellers: list[Participant], buyers: list[Participant]) -> None:
    """
    Sort both books in place.

    Sellers: lowest ask first. Buyers: highest bid first.
    list.sort is stable, so equal prices keep round insertion order.
    """
    sellers.sort(key=lambda p: p.ask)
    buyers.sort(key=lambda p: p.bid, reverse=True)
