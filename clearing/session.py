"""
Auction Session.

Runs a multi-round sequence of batch auctions from a configuration, carrying
balances between rounds through a ledger and collecting per-participant
results into a DataFrame.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pandas as pd
from omegaconf import DictConfig

from clearing.auction import RoundOutcome, run_round
from clearing.event_logger import EventLogger
from clearing.invariants import InvariantChecker
from clearing.ledger import BalanceLedger
from clearing.order_generator import (
    FixedOrderGenerator,
    OrderGenerator,
    UniformOrderGenerator,
    load_round,
)
from clearing.participant import Participant


def create_generator(config: DictConfig, seed: int | None = None) -> OrderGenerator:
    """
    Build the order generator named by ``config.kind``.

    Kinds:
        uniform: UniformOrderGenerator with the configured bounds
        file: Replays the round stored at ``config.path``
        fixed: Replays ``config.participants`` (list of records)

    Raises:
        ValueError: For an unknown kind or a missing path/participants entry
    """
    kind = config.get("kind", "uniform")

    if kind == "uniform":
        return UniformOrderGenerator(
            num_sellers=config.get("num_sellers", 5),
            num_buyers=config.get("num_buyers", 5),
            price_min=config.get("price_min", 1),
            price_max=config.get("price_max", 100),
            quantity_min=config.get("quantity_min", 0),
            quantity_max=config.get("quantity_max", 1000),
            opening_balance=config.get("opening_balance", 10000.0),
            seed=seed,
        )
    if kind == "file":
        path = config.get("path")
        if not path:
            raise ValueError("generator.kind=file requires generator.path")
        return FixedOrderGenerator(load_round(path))
    if kind == "fixed":
        records = config.get("participants")
        if not records:
            raise ValueError("generator.kind=fixed requires generator.participants")
        return FixedOrderGenerator([Participant.from_dict(dict(r)) for r in records])

    raise ValueError(f"Unknown generator kind: {kind}")


class Session:
    """
    Manages the execution of an auction session.

    Each call to run() or run_parallel() starts from a fresh ledger, checker,
    event log and result set, so repeated runs do not accumulate rows.
    """

    def __init__(self, config: DictConfig, generator: OrderGenerator | None = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.results: list[dict] = []
        self.outcomes: list[RoundOutcome] = []

        experiment = config.get("experiment") or {}
        auction = config.get("auction") or {}

        self.num_rounds = int(auction.get("num_rounds", 800))
        if self.num_rounds < 1:
            raise ValueError(f"auction.num_rounds must be >= 1, got {self.num_rounds}")

        seed = experiment.get("rng_seed", None)
        self.generator = generator or create_generator(config.get("generator") or {}, seed)

        self.check_invariants = auction.get("check_invariants", True)
        self.atol = auction.get("atol", 1e-6)
        self.use_ledger = auction.get("use_ledger", True)

        self.checker: InvariantChecker | None = None
        self.ledger: BalanceLedger | None = None

        # Event logger for round/fill records (optional)
        self.event_logger: EventLogger | None = None
        self.event_log_path: Path | None = None
        if experiment.get("log_events", False):
            log_dir = Path(experiment.get("log_dir", "logs"))
            exp_id = experiment.get("name", "auction")
            self.event_log_path = log_dir / f"{exp_id}_events.jsonl"
            self.logger.info(f"Event logging enabled: {self.event_log_path}")

    def _start(self) -> None:
        """Reset per-run state before the first round."""
        self.results = []
        self.outcomes = []
        self.checker = InvariantChecker(atol=self.atol) if self.check_invariants else None
        self.ledger = BalanceLedger() if self.use_ledger else None
        if self.event_log_path is not None:
            self.event_logger = EventLogger(self.event_log_path)

    def _close_event_log(self) -> None:
        if self.event_logger is not None:
            self.event_logger.close()

    def _record(self, outcome: RoundOutcome) -> None:
        """Fold a finished round into ledger, checker, event log and results."""
        if self.checker is not None:
            self.checker.check(outcome)
        records = outcome.to_records()
        if self.ledger is not None:
            self.ledger.apply(outcome)
            # Rows carry the running balance, whatever the round was seeded with
            for record in records:
                record["balance"] = self.ledger.balance(record["participant_id"])
        if self.event_logger is not None:
            self.event_logger.log_outcome(outcome)
        self.outcomes.append(outcome)
        self.results.extend(records)

    def _finish(self) -> pd.DataFrame:
        if self.checker is not None:
            self.checker.check_totals()
        return pd.DataFrame(self.results)

    def run(self) -> pd.DataFrame:
        """Run every round in order and return one row per participant per round."""
        self.logger.info(f"Running {self.num_rounds} rounds")
        self._start()

        try:
            for r in range(1, self.num_rounds + 1):
                participants = self.generator.generate(r)
                if self.ledger is not None:
                    participants = self.ledger.seed_round(participants)
                self._record(run_round(participants, round_index=r))
            return self._finish()
        finally:
            self._close_event_log()

    def run_parallel(self, workers: int = 4) -> pd.DataFrame:
        """
        Clear rounds on a thread pool, then apply them serially.

        Orders are drawn up front in round order so a seeded generator yields
        the same rounds as run(). Each round owns its own participants; ledger
        updates, checks and logging happen on this thread in round order.
        Rounds are cleared against the ledger as of the start of the run, and
        the balance column is rewritten from the ledger as each round is
        applied, so the returned frame matches run().
        """
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")

        self.logger.info(f"Running {self.num_rounds} rounds on {workers} workers")
        self._start()

        try:
            rounds = []
            for r in range(1, self.num_rounds + 1):
                participants = self.generator.generate(r)
                if self.ledger is not None:
                    participants = self.ledger.seed_round(participants)
                rounds.append((r, participants))

            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(run_round, participants, r) for r, participants in rounds]
                for future in futures:
                    self._record(future.result())

            return self._finish()
        finally:
            self._close_event_log()


def summary(results: pd.DataFrame) -> pd.DataFrame:
    """
    Aggregate a session's results to one row per round.

    Columns: traded_quantity, sell_price, buy_price, filled_sell, filled_buy,
    seller_delta, buyer_delta.
    """
    if results.empty:
        return pd.DataFrame()

    per_round = results.groupby("round").agg(
        traded_quantity=("traded_quantity", "first"),
        sell_price=("sell_price", "first"),
        buy_price=("buy_price", "first"),
    )
    sides = results.pivot_table(
        index="round",
        columns="side",
        values=["filled_quantity", "balance_delta"],
        aggfunc="sum",
        fill_value=0,
    )
    for column, side, name in [
        ("filled_quantity", "sell", "filled_sell"),
        ("filled_quantity", "buy", "filled_buy"),
        ("balance_delta", "sell", "seller_delta"),
        ("balance_delta", "buy", "buyer_delta"),
    ]:
        if (column, side) in sides.columns:
            per_round[name] = sides[(column, side)]
        else:
            per_round[name] = 0
    return per_round.reset_index()
