"""
Order generators: where each round's participants come from.

The engine treats order generation as an external input. Generators follow
a small protocol so runs can be driven by seeded random orders, a fixed
replayed book, or a JSON fixture file.

The uniform defaults mirror the ledger sample's market: five sellers
(ids 1-5) and five buyers (ids 6-10) named VNO<id>, integer prices in
[1, 100], integer quantities in [0, 1000] and an opening balance of 10000.
"""

import json
from pathlib import Path
from typing import Protocol, Sequence

import numpy as np

from clearing.participant import Participant


class OrderGenerator(Protocol):
    """Anything that can produce the participants of a round."""

    def generate(self, round_index: int) -> list[Participant]:
        ...


class UniformOrderGenerator:
    """
    Random orders with uniform integer prices and quantities.

    Sellers come first in id order, then buyers. Bounds are inclusive.
    Reproducible for a given seed; each generate() call draws fresh orders.
    """

    def __init__(
        self,
        num_sellers: int = 5,
        num_buyers: int = 5,
        price_min: int = 1,
        price_max: int = 100,
        quantity_min: int = 0,
        quantity_max: int = 1000,
        opening_balance: float = 10000.0,
        seed: int | None = None,
    ) -> None:
        if num_sellers < 0 or num_buyers < 0:
            raise ValueError(
                f"participant counts must be >= 0, got {num_sellers} sellers "
                f"and {num_buyers} buyers"
            )
        if price_min > price_max:
            raise ValueError(f"price_min ({price_min}) must be <= price_max ({price_max})")
        if quantity_min < 0 or quantity_min > quantity_max:
            raise ValueError(
                f"need 0 <= quantity_min <= quantity_max, got "
                f"[{quantity_min}, {quantity_max}]"
            )

        self.num_sellers = num_sellers
        self.num_buyers = num_buyers
        self.price_min = price_min
        self.price_max = price_max
        self.quantity_min = quantity_min
        self.quantity_max = quantity_max
        self.opening_balance = opening_balance
        self.rng = np.random.default_rng(seed)

    def _draw_price(self) -> int:
        # rng.integers(low, high) -> [low, high)
        return int(self.rng.integers(self.price_min, self.price_max + 1))

    def _draw_quantity(self) -> int:
        return int(self.rng.integers(self.quantity_min, self.quantity_max + 1))

    def generate(self, round_index: int) -> list[Participant]:
        participants = []
        for i in range(self.num_sellers + self.num_buyers):
            pid = i + 1
            is_seller = i < self.num_sellers
            price = self._draw_price()
            participants.append(Participant(
                id=pid,
                name=f"VNO{pid}",
                balance=self.opening_balance,
                ask=price if is_seller else None,
                bid=None if is_seller else price,
                quantity=self._draw_quantity(),
            ))
        return participants


class FixedOrderGenerator:
    """Replays the same book every round (fresh copies each time)."""

    def __init__(self, participants: Sequence[Participant]) -> None:
        self.participants = [p.copy() for p in participants]

    def generate(self, round_index: int) -> list[Participant]:
        return [p.copy() for p in self.participants]


def load_round(path: Path | str) -> list[Participant]:
    """
    Read one round's participants from a JSON file.

    The file holds a list of participant records; ledger-layer field names
    (vno_id, vno_name, won_quantity) are accepted.

    Raises:
        ValueError: If the file does not contain a JSON list
    """
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of participants")
    return [Participant.from_dict(record) for record in data]


def generate_rounds(
    generator: OrderGenerator, num_rounds: int, start: int = 1
) -> list[list[Participant]]:
    """Draw ``num_rounds`` consecutive rounds from a generator."""
    return [generator.generate(r) for r in range(start, start + num_rounds)]
