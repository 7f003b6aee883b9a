# tests/unit/clearing/test_settlement.py
"""
Tests for partial fills and balance updates.
"""

from clearing.resolver import NO_TRADE, ClearingResult
from clearing.settlement import fill_book, settle, snapshot_quantities
from tests.conftest import buyer, seller


class TestFillBook:
    def test_full_fills_then_one_partial(self):
        book = [buyer(1, 90, 3), buyer(2, 80, 3), buyer(3, 70, 3)]
        left = fill_book(book, 2, 4)
        assert left == 0
        assert [p.quantity for p in book] == [0, 2, 3]

    def test_stops_at_marginal_index(self):
        book = [seller(1, 10, 2), seller(2, 20, 2), seller(3, 30, 2)]
        left = fill_book(book, 1, 10)
        assert left == 6
        assert [p.quantity for p in book] == [0, 0, 2]

    def test_zero_quantity_leaves_book_untouched(self):
        book = [seller(1, 10, 2)]
        assert fill_book(book, 0, 0) == 0
        assert book[0].quantity == 2


class TestSettle:
    def test_single_pair_full_fill(self):
        sellers = [seller(1, 10, 5)]
        buyers = [buyer(2, 20, 5)]
        clearing = ClearingResult(marginal_index=0, sell_price=15, buy_price=15, quantity=5)

        snapshot = settle(sellers, buyers, clearing)

        assert snapshot.seller_quantities == (5,)
        assert snapshot.buyer_quantities == (5,)
        assert sellers[0].quantity == 0
        assert sellers[0].balance == 75
        assert buyers[0].quantity == 0
        assert buyers[0].balance == -75

    def test_buyer_partially_filled(self):
        sellers = [seller(1, 10, 3)]
        buyers = [buyer(2, 20, 5)]
        clearing = ClearingResult(marginal_index=0, sell_price=15, buy_price=15, quantity=3)

        settle(sellers, buyers, clearing)

        assert sellers[0].quantity == 0
        assert buyers[0].quantity == 2
        assert sellers[0].balance == 45
        assert buyers[0].balance == -45

    def test_spread_prices_applied_per_side(self):
        sellers = [seller(1, 10, 4, balance=100), seller(2, 20, 9)]
        buyers = [buyer(3, 60, 4, balance=100), buyer(4, 40, 9)]
        clearing = ClearingResult(marginal_index=0, sell_price=20, buy_price=40, quantity=4)

        settle(sellers, buyers, clearing)

        assert sellers[0].balance == 100 + 4 * 20
        assert buyers[0].balance == 100 - 4 * 40
        # Beyond the marginal index nothing moves
        assert sellers[1].quantity == 9 and sellers[1].balance == 0
        assert buyers[1].quantity == 9 and buyers[1].balance == 0

    def test_participants_after_counter_exhausted_untouched(self):
        sellers = [seller(1, 10, 10), seller(2, 11, 10)]
        buyers = [buyer(3, 50, 4), buyer(4, 49, 3), buyer(5, 48, 3)]
        clearing = ClearingResult(marginal_index=1, sell_price=30, buy_price=30, quantity=7)

        settle(sellers, buyers, clearing)

        assert [p.quantity for p in sellers] == [3, 10]
        assert sellers[1].balance == 0
        assert [p.quantity for p in buyers] == [0, 0, 3]
        assert buyers[2].balance == 0

    def test_no_trade_changes_nothing(self):
        sellers = [seller(1, 10, 5, balance=7)]
        buyers = [buyer(2, 20, 5, balance=7)]
        assert settle(sellers, buyers, NO_TRADE) is None
        assert sellers[0].quantity == 5 and sellers[0].balance == 7
        assert buyers[0].quantity == 5 and buyers[0].balance == 7


def test_snapshot_covers_traded_range_only():
    sellers = [seller(1, 10, 1), seller(2, 20, 2), seller(3, 30, 3)]
    buyers = [buyer(4, 90, 4), buyer(5, 80, 5), buyer(6, 70, 6)]
    snapshot = snapshot_quantities(sellers, buyers, 1)
    assert snapshot.seller_quantities == (1, 2)
    assert snapshot.buyer_quantities == (4, 5)
