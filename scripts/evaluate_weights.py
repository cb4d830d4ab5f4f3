#!/usr/bin/env python3
"""Pit a trained weight file against a baseline policy."""

import argparse
import json

import numpy as np

from squadbattle.evaluation import evaluate_policies
from squadbattle.models import LinearEvaluator
from squadbattle.selfplay import RandomPolicy, make_minimax_policy


def load_evaluator(path: str) -> LinearEvaluator:
    evaluator = LinearEvaluator()
    evaluator.load_weights(path)
    return evaluator


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("weights", help="Path to the comma-separated weight file")
    parser.add_argument("--episodes", type=int, default=20)
    parser.add_argument("--depth", type=int, default=2)
    parser.add_argument("--baseline", choices=["random", "default"], default="default")
    parser.add_argument("--baseline-depth", type=int, default=2)
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    candidate = make_minimax_policy(load_evaluator(args.weights), depth=args.depth, rng=rng)
    if args.baseline == "random":
        baseline = RandomPolicy(rng)
    else:
        baseline = make_minimax_policy(LinearEvaluator(), depth=args.baseline_depth, rng=rng)

    result = evaluate_policies(candidate, baseline, episodes=args.episodes, seed=args.seed)

    output = {
        "games": result.games_played,
        "candidate_wins": result.player1_wins,
        "baseline_wins": result.player2_wins,
        "ties": result.ties,
        "average_length": result.average_length,
        "candidate_winrate": result.winrate_player1(),
        "baseline_winrate": result.winrate_player2(),
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
