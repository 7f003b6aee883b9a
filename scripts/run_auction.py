"""
Run Auction Script.

Usage:
    python scripts/run_auction.py
    python scripts/run_auction.py auction.num_rounds=1000 experiment.rng_seed=7
    python scripts/run_auction.py generator=file
"""

import logging
import os

import hydra
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, open_dict

from clearing.session import Session, summary


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    # Configure logging
    log_level = getattr(logging, cfg.experiment.log_level.upper())

    # Force root logger
    logging.getLogger().setLevel(log_level)
    logging.getLogger("clearing").setLevel(log_level)

    # Add handler if none exists (Hydra might capture, but we want stdout)
    if not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s][%(name)s][%(levelname)s] - %(message)s'))
        logging.getLogger().addHandler(handler)

    logging.info(f"Running experiment: {cfg.experiment.name}")

    if cfg.generator.get("path"):
        with open_dict(cfg):
            cfg.generator.path = to_absolute_path(cfg.generator.path)

    session = Session(cfg)
    workers = cfg.experiment.get("workers", 1)
    results = session.run_parallel(workers) if workers > 1 else session.run()

    # Save results
    output_dir = to_absolute_path(cfg.experiment.output_dir)
    os.makedirs(output_dir, exist_ok=True)
    results.to_csv(os.path.join(output_dir, "results.csv"), index=False)

    logging.info(f"Results saved to {output_dir}")
    logging.info("Traded quantity by round:")
    print(summary(results)[["round", "traded_quantity", "sell_price", "buy_price"]].describe())

if __name__ == "__main__":
    main()
