from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from squadbattle.core import GameResult, Player
from squadbattle.models import LinearEvaluator
from squadbattle.selfplay import GameRecord


@dataclass
class TDConfig:
    alpha: float = 0.0005
    gamma: float = 0.95
    weight_clip: float = 1000.0


@dataclass
class TDStepOutput:
    steps: int
    mean_abs_delta: float
    weight_norm: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "steps": float(self.steps),
            "mean_abs_delta": self.mean_abs_delta,
            "weight_norm": self.weight_norm,
        }


def terminal_reward(result: GameResult, player: Player) -> float:
    if result == GameResult.PLAYER1_WIN:
        return 1.0 if player == Player.ONE else -1.0
    if result == GameResult.PLAYER2_WIN:
        return 1.0 if player == Player.TWO else -1.0
    return 0.0


class TDTrainer:
    """TD(0) updates of a LinearEvaluator's weights from finished self-play games.

    Each player's steps form their own chain: the last step is pulled towards
    the final reward, every earlier one towards ``gamma`` times the value of
    that player's following step. Weights are updated in place.
    """

    def __init__(self, evaluator: LinearEvaluator, config: Optional[TDConfig] = None) -> None:
        self.evaluator = evaluator
        self.config = config or TDConfig()

    def update(self, record: GameRecord) -> TDStepOutput:
        if not record.steps:
            return TDStepOutput(steps=0, mean_abs_delta=0.0, weight_norm=float(np.linalg.norm(self.evaluator.weights)))

        weights = self.evaluator.weights
        targets = {player: terminal_reward(record.result, player) for player in Player}
        deltas = []

        for step in reversed(record.steps):
            value = float(np.dot(step.features, weights))
            delta = targets[step.actor] - value
            weights += self.config.alpha * delta * step.features
            np.clip(weights, -self.config.weight_clip, self.config.weight_clip, out=weights)
            targets[step.actor] = self.config.gamma * value
            deltas.append(abs(delta))

        return TDStepOutput(
            steps=len(record.steps),
            mean_abs_delta=float(np.mean(deltas)),
            weight_norm=float(np.linalg.norm(weights)),
        )
