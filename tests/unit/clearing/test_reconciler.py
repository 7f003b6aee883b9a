# tests/unit/clearing/test_reconciler.py
"""
Tests for merging books back and deriving filled quantities.
"""

from clearing.reconciler import merge_back, reconcile
from tests.conftest import buyer, seller


def test_merge_orders_by_id():
    sellers = [seller(3, 10, 1), seller(1, 20, 1)]
    buyers = [buyer(4, 90, 1), buyer(2, 80, 1)]
    assert [p.id for p in merge_back(sellers, buyers)] == [1, 2, 3, 4]


def test_merge_does_not_mutate_books():
    sellers = [seller(3, 10, 1), seller(1, 20, 1)]
    buyers = [buyer(2, 80, 1)]
    merge_back(sellers, buyers)
    assert [p.id for p in sellers] == [3, 1]


def test_merge_is_idempotent():
    sellers = [seller(5, 10, 1), seller(1, 20, 1)]
    buyers = [buyer(4, 90, 1), buyer(2, 80, 1)]
    once = merge_back(sellers, buyers)
    twice = merge_back(sellers, buyers)
    assert [p.id for p in once] == [p.id for p in twice]
    assert all(a is b for a, b in zip(once, twice))


def test_filled_quantity_matched_by_id():
    before = [seller(2, 10, 5), buyer(1, 20, 8)]
    sellers = [seller(2, 10, 0)]
    buyers = [buyer(1, 20, 3)]

    merged = reconcile(before, sellers, buyers)

    assert [p.id for p in merged] == [1, 2]
    assert merged[0].filled_quantity == 5
    assert merged[1].filled_quantity == 5


def test_unfilled_participants_report_zero():
    before = [seller(1, 10, 5), buyer(2, 5, 8)]
    merged = reconcile(before, [seller(1, 10, 5)], [buyer(2, 5, 8)])
    assert [p.filled_quantity for p in merged] == [0, 0]
