"""
Balance ledger shared across rounds.

Rounds clear independently and may run concurrently, but carrying balances
from one round to the next is a read-modify-write on shared state. The
ledger serialises every write behind one lock so settlement outputs are
applied by a single writer.
"""

import logging
import threading
from typing import Sequence

from clearing.auction import RoundOutcome
from clearing.participant import Participant


class BalanceLedger:
    """
    Participant balances persisted between rounds.

    Attributes:
        balances: participant id -> current balance
        rounds_applied: Number of outcomes applied so far
    """

    def __init__(self, opening_balances: dict[int, float] | None = None) -> None:
        self.balances: dict[int, float] = dict(opening_balances or {})
        self.rounds_applied = 0
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def balance(self, participant_id: int) -> float | None:
        with self._lock:
            return self.balances.get(participant_id)

    def seed_round(self, participants: Sequence[Participant]) -> list[Participant]:
        """
        Return copies of a round's participants carrying ledger balances.

        Participants the ledger has never seen keep their generated balance.
        """
        with self._lock:
            seeded = []
            for p in participants:
                copy = p.copy()
                if p.id in self.balances:
                    copy.balance = self.balances[p.id]
                seeded.append(copy)
            return seeded

    def apply(self, outcome: RoundOutcome) -> None:
        """
        Apply a round's balance deltas.

        Deltas rather than absolute balances are applied, so an outcome
        computed from a stale snapshot still moves each balance by exactly
        what settlement decided.
        """
        deltas = outcome.balance_deltas()
        opening = {p.id: p.balance for p in outcome.before}
        with self._lock:
            for pid, delta in deltas.items():
                current = self.balances.get(pid, opening[pid])
                self.balances[pid] = current + delta
            self.rounds_applied += 1
        self.logger.debug(f"Applied round {outcome.round_index} to ledger")

    def total(self) -> float:
        with self._lock:
            return float(sum(self.balances.values()))
