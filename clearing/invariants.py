"""
Cross-round conservation checks.

A settled round must conserve both units and money:

- Units: filled quantity summed over sellers equals the sum over buyers,
  and each participant's fill lies in [0, original quantity].
- Money: seller balance deltas + buyer balance deltas + retained spread
  revenue == 0. With a single clearing price the spread is zero and seller
  gains exactly mirror buyer payments.

Violations mean the settlement arithmetic is wrong, so they raise
InvariantViolationError rather than returning a status.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from clearing.errors import InvariantViolationError

if TYPE_CHECKING:
    from clearing.auction import RoundOutcome


class InvariantChecker:
    """
    Verifies settled rounds and accumulates totals across them.

    Usage:
        checker = InvariantChecker()
        for participants in rounds:
            run_round(participants, checker=checker)
        checker.check_totals()
    """

    def __init__(self, atol: float = 1e-6, rtol: float = 1e-9) -> None:
        self.atol = atol
        self.rtol = rtol
        self.logger = logging.getLogger(__name__)

        self.rounds_checked = 0
        self.rounds_traded = 0
        self.total_filled_sell = 0
        self.total_filled_buy = 0
        self.total_seller_delta = 0.0
        self.total_buyer_delta = 0.0
        self.total_spread_revenue = 0.0

    def _close(self, a: float, b: float, atol: float | None = None) -> bool:
        # rtol covers rounding on large notionals
        atol = self.atol if atol is None else atol
        return bool(np.isclose(a, b, rtol=self.rtol, atol=atol))

    def check(self, outcome: "RoundOutcome") -> None:
        """
        Verify one round and add it to the running totals.

        Raises:
            InvariantViolationError: On the first failed check
        """
        idx = outcome.round_index
        opening = {p.id: p for p in outcome.before}

        for p in outcome.after:
            original = opening[p.id].quantity
            if not 0 <= p.filled_quantity <= original:
                raise InvariantViolationError(
                    "fill_bounds",
                    f"round {idx}: participant {p.id} filled {p.filled_quantity} "
                    f"of {original}",
                )
            if p.filled_quantity != original - p.quantity:
                raise InvariantViolationError(
                    "fill_consistency",
                    f"round {idx}: participant {p.id} filled {p.filled_quantity} "
                    f"but quantity went {original} -> {p.quantity}",
                )

        sellers = outcome.sellers()
        buyers = outcome.buyers()
        filled_sell = sum(p.filled_quantity for p in sellers)
        filled_buy = sum(p.filled_quantity for p in buyers)
        if filled_sell != filled_buy:
            raise InvariantViolationError(
                "filled_quantity",
                f"round {idx}: sellers filled {filled_sell}, buyers filled {filled_buy}",
            )
        if filled_sell != outcome.traded_quantity:
            raise InvariantViolationError(
                "traded_quantity",
                f"round {idx}: filled {filled_sell} but cleared {outcome.traded_quantity}",
            )

        deltas = outcome.balance_deltas()
        seller_delta = float(sum(deltas[p.id] for p in sellers))
        buyer_delta = float(sum(deltas[p.id] for p in buyers))
        spread_revenue = outcome.spread_revenue
        if not self._close(seller_delta + spread_revenue, -buyer_delta):
            raise InvariantViolationError(
                "balance",
                f"round {idx}: seller delta {seller_delta} + buyer delta {buyer_delta} "
                f"+ spread {spread_revenue} != 0",
            )

        self.rounds_checked += 1
        if outcome.traded_quantity > 0:
            self.rounds_traded += 1
        self.total_filled_sell += filled_sell
        self.total_filled_buy += filled_buy
        self.total_seller_delta += seller_delta
        self.total_buyer_delta += buyer_delta
        self.total_spread_revenue += spread_revenue

    def check_totals(self) -> None:
        """
        Verify the totals accumulated over every checked round.

        Raises:
            InvariantViolationError: If accumulated units or money do not balance
        """
        if self.total_filled_sell != self.total_filled_buy:
            raise InvariantViolationError(
                "filled_quantity_total",
                f"sellers filled {self.total_filled_sell}, "
                f"buyers filled {self.total_filled_buy} over {self.rounds_checked} rounds",
            )
        net = self.total_seller_delta + self.total_buyer_delta + self.total_spread_revenue
        # Tolerance grows with the number of float additions
        received = self.total_seller_delta + self.total_spread_revenue
        if not self._close(received, -self.total_buyer_delta, atol=self.atol * max(self.rounds_checked, 1)):
            raise InvariantViolationError(
                "balance_total",
                f"net balance drift {net} over {self.rounds_checked} rounds",
            )
        self.logger.info(
            f"Invariants hold over {self.rounds_checked} rounds "
            f"({self.rounds_traded} traded, {self.total_filled_sell} units)"
        )
