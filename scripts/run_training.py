#!/usr/bin/env python3
"""Train the evaluator weights with epsilon-greedy minimax self-play and TD(0)."""

import argparse
import json
import logging
from pathlib import Path

import yaml
from tqdm.auto import tqdm

from squadbattle.orchestration import SelfPlayTrainer, SelfPlayTrainerConfig
from squadbattle.training import TDConfig


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=str, default="configs/training.yaml")
    parser.add_argument("--games", type=int)
    parser.add_argument("--depth", type=int)
    parser.add_argument("--alpha", type=float)
    parser.add_argument("--gamma", type=float)
    parser.add_argument("--weights")
    parser.add_argument("--log-file")
    parser.add_argument("--covariance-file")
    parser.add_argument("--report-every", type=int)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--wandb-project")
    parser.add_argument("--wandb-run-name")
    parser.add_argument("--wandb-entity")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    cfg = {}
    if args.config:
        cfg_path = Path(args.config)
        if cfg_path.exists():
            cfg = yaml.safe_load(cfg_path.read_text()) or {}

    td_cfg = cfg.get("td", {})
    if args.alpha is not None:
        td_cfg["alpha"] = args.alpha
    if args.gamma is not None:
        td_cfg["gamma"] = args.gamma
    td = TDConfig(**td_cfg)

    exploration = cfg.get("exploration", {})
    config = SelfPlayTrainerConfig(
        num_games=args.games if args.games is not None else cfg.get("num_games", 1000),
        search_depth=args.depth if args.depth is not None else cfg.get("search_depth", 3),
        td_config=td,
        epsilon_start=exploration.get("epsilon_start", 0.20),
        epsilon_end=exploration.get("epsilon_end", 0.05),
        anneal_games=exploration.get("anneal_games", 20000),
        report_every=args.report_every if args.report_every is not None else cfg.get("report_every", 1000),
        weights_path=args.weights or cfg.get("weights_path", "weights.csv"),
        log_path=args.log_file or cfg.get("log_path", "training_log.csv"),
        covariance_path=args.covariance_file or cfg.get("covariance_path", "covariance.csv"),
        seed=args.seed if args.seed is not None else cfg.get("seed"),
        wandb_project=args.wandb_project or cfg.get("wandb_project"),
        wandb_run_name=args.wandb_run_name or cfg.get("wandb_run_name"),
        wandb_entity=args.wandb_entity or cfg.get("wandb_entity"),
    )

    trainer = SelfPlayTrainer(config)
    try:
        with tqdm(total=config.num_games, desc="Games") as bar:

            def progress(game: int, total: int, tally: dict) -> None:
                bar.update(1)
                bar.set_postfix(
                    first=f"{tally['p1_first_wins']},{tally['p2_first_wins']}",
                    second=f"{tally['p1_second_wins']},{tally['p2_second_wins']}",
                    ties=tally["ties"],
                )

            summary = trainer.run(progress=progress)
        print(json.dumps(summary, indent=2))
    finally:
        trainer.close()


if __name__ == "__main__":
    main()
