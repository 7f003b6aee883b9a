# tests/conftest.py
"""Minimal shared fixtures and builders for the test suite."""

import numpy as np
import pytest

from clearing.participant import Participant


def seller(pid: int, ask: float, quantity: int, balance: float = 0.0) -> Participant:
    """Build a seller record."""
    return Participant(id=pid, name=f"S{pid}", balance=balance, ask=ask, quantity=quantity)


def buyer(pid: int, bid: float, quantity: int, balance: float = 0.0) -> Participant:
    """Build a buyer record."""
    return Participant(id=pid, name=f"B{pid}", balance=balance, bid=bid, quantity=quantity)


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)


@pytest.fixture
def vno_round():
    """The ledger sample's ten-participant round (5 sellers, 5 buyers)."""
    asks = [(1, 98, 182), (2, 24, 78), (3, 27, 652), (4, 61, 24), (5, 75, 119)]
    bids = [(6, 63, 491), (7, 69, 179), (8, 68, 397), (9, 75, 579), (10, 6, 804)]
    return [seller(pid, ask, qty, 10000.0) for pid, ask, qty in asks] + [
        buyer(pid, bid, qty, 10000.0) for pid, bid, qty in bids
    ]
