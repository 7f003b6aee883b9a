# tests/unit/clearing/test_ledger.py
"""
Tests for the balance ledger shared across rounds.
"""

from concurrent.futures import ThreadPoolExecutor

from clearing.auction import run_round
from clearing.ledger import BalanceLedger
from tests.conftest import buyer, seller


def pair_round(balance=0.0):
    return [seller(1, 10, 5, balance=balance), buyer(2, 20, 5, balance=balance)]


def test_unknown_participants_keep_generated_balance():
    ledger = BalanceLedger()
    seeded = ledger.seed_round(pair_round(balance=100))
    assert [p.balance for p in seeded] == [100, 100]


def test_seed_round_uses_ledger_balances():
    ledger = BalanceLedger({1: 500.0})
    original = pair_round(balance=100)
    seeded = ledger.seed_round(original)
    assert seeded[0].balance == 500.0
    assert seeded[1].balance == 100
    assert original[0].balance == 100


def test_apply_carries_balances_forward():
    ledger = BalanceLedger()
    for r in range(3):
        participants = ledger.seed_round(pair_round(balance=1000))
        ledger.apply(run_round(participants, round_index=r))

    assert ledger.balance(1) == 1000 + 3 * 75
    assert ledger.balance(2) == 1000 - 3 * 75
    assert ledger.rounds_applied == 3
    assert ledger.total() == 2000


def test_concurrent_applies_are_serialised():
    outcome = run_round(pair_round(balance=0))
    ledger = BalanceLedger({1: 0.0, 2: 0.0})

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: ledger.apply(outcome), range(200)))

    assert ledger.rounds_applied == 200
    assert ledger.balance(1) == 200 * 75
    assert ledger.balance(2) == -200 * 75
