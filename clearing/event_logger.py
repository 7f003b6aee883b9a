"""
Event Logger for round-by-round clearing records.

Logs one event per cleared round and one per participant fill to JSONL for
post-hoc analysis of clearing prices and fill distribution.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

from clearing.auction import RoundOutcome


@dataclass
class RoundEvent:
    """Clearing result of one round."""

    round: int
    num_sellers: int
    num_buyers: int
    marginal_index: int | None
    sell_price: float
    buy_price: float
    quantity: int
    spread_revenue: float


@dataclass
class FillEvent:
    """A participant's non-zero fill in a round."""

    round: int
    participant_id: int
    side: str  # "sell" or "buy"
    price: float  # Participant's own ask/bid
    filled_quantity: int
    remaining_quantity: int
    balance_delta: float


class EventLogger:
    """
    Logs clearing events to JSONL format.

    Usage:
        logger = EventLogger(Path("logs/run_events.jsonl"))
        logger.log_outcome(outcome)
        logger.close()
    """

    def __init__(self, output_path: Path):
        """
        Initialize the event logger.

        Args:
            output_path: Path to write JSONL file
        """
        self.output_path = output_path
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._open()

    def _open(self) -> None:
        """Open the output file for writing."""
        self._file = open(self.output_path, "w")

    def __enter__(self) -> "EventLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def log_round(self, outcome: RoundOutcome) -> None:
        """Log the clearing result of a round."""
        clearing = outcome.clearing
        event = RoundEvent(
            round=outcome.round_index,
            num_sellers=len(outcome.sellers()),
            num_buyers=len(outcome.buyers()),
            marginal_index=clearing.marginal_index,
            sell_price=clearing.sell_price,
            buy_price=clearing.buy_price,
            quantity=clearing.quantity,
            spread_revenue=outcome.spread_revenue,
        )
        self._write_event(event)

    def log_fills(self, outcome: RoundOutcome) -> None:
        """Log every participant that was filled in a round."""
        deltas = outcome.balance_deltas()
        for p in outcome.after:
            if p.filled_quantity == 0:
                continue
            event = FillEvent(
                round=outcome.round_index,
                participant_id=p.id,
                side=p.side.value,
                price=p.price,
                filled_quantity=p.filled_quantity,
                remaining_quantity=p.quantity,
                balance_delta=deltas[p.id],
            )
            self._write_event(event)

    def log_outcome(self, outcome: RoundOutcome) -> None:
        """Log a round event followed by its fill events."""
        self.log_round(outcome)
        self.log_fills(outcome)

    def _write_event(self, event: RoundEvent | FillEvent) -> None:
        """Write an event to the JSONL file."""
        if self._file is None:
            return

        data = asdict(event)
        data["event_type"] = "round" if isinstance(event, RoundEvent) else "fill"
        self._file.write(json.dumps(data) + "\n")

    def flush(self) -> None:
        """Flush the output buffer."""
        if self._file:
            self._file.flush()

    def close(self) -> None:
        """Close the output file."""
        if self._file:
            self._file.close()
            self._file = None
