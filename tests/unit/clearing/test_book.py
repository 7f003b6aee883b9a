# tests/unit/clearing/test_book.py
"""
Tests for splitting a round into books and sorting them.
"""

import pytest

from clearing.book import sort_books, split_books
from clearing.errors import MalformedOrderError
from clearing.participant import Participant
from tests.conftest import buyer, seller


class TestSplitBooks:
    def test_partitions_by_side_preserving_order(self):
        round_ = [seller(1, 30, 1), buyer(2, 50, 1), seller(3, 10, 1), buyer(4, 40, 1)]
        sellers, buyers = split_books(round_)
        assert [p.id for p in sellers] == [1, 3]
        assert [p.id for p in buyers] == [2, 4]

    def test_books_hold_references(self):
        """Settlement on a book must reach the round's participants."""
        round_ = [seller(1, 30, 1), buyer(2, 50, 1)]
        sellers, buyers = split_books(round_)
        assert sellers[0] is round_[0]
        assert buyers[0] is round_[1]

    def test_both_sides_set_rejects_whole_round(self):
        bad = Participant(id=9, name="X", balance=0, ask=10, bid=20, quantity=1)
        with pytest.raises(MalformedOrderError) as exc:
            split_books([seller(1, 30, 1), bad, buyer(2, 50, 1)])
        assert exc.value.participant_id == 9

    def test_neither_side_set_rejected(self):
        bad = Participant(id=5, name="X", balance=0, quantity=1)
        with pytest.raises(MalformedOrderError):
            split_books([bad])

    def test_empty_round(self):
        assert split_books([]) == ([], [])


class TestSortBooks:
    def test_sellers_ascending_buyers_descending(self):
        sellers = [seller(1, 30, 1), seller(2, 10, 1), seller(3, 20, 1)]
        buyers = [buyer(4, 40, 1), buyer(5, 60, 1), buyer(6, 50, 1)]
        sort_books(sellers, buyers)
        assert [p.ask for p in sellers] == [10, 20, 30]
        assert [p.bid for p in buyers] == [60, 50, 40]

    def test_ties_keep_insertion_order(self):
        sellers = [seller(3, 10, 1), seller(1, 10, 1), seller(2, 5, 1)]
        buyers = [buyer(6, 50, 1), buyer(4, 50, 1), buyer(5, 70, 1)]
        sort_books(sellers, buyers)
        assert [p.id for p in sellers] == [2, 3, 1]
        assert [p.id for p in buyers] == [5, 6, 4]

    def test_sorting_does_not_touch_fields(self):
        sellers = [seller(1, 30, 7, balance=5), seller(2, 10, 8, balance=6)]
        snapshot = {p.id: p.to_dict() for p in sellers}
        sort_books(sellers, [])
        assert {p.id: p.to_dict() for p in sellers} == snapshot
