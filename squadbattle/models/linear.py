from __future__ import annotations

import os
from typing import Optional, Sequence, Union

import numpy as np

from squadbattle.core import GameState, Player
from squadbattle.features import FEATURE_COUNT, build_feature_vector

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_WEIGHT = 1.0


def default_weights() -> np.ndarray:
    return np.full((FEATURE_COUNT,), DEFAULT_WEIGHT, dtype=np.float64)


def parse_weights(text: str) -> np.ndarray:
    """Decode comma-separated weights; missing or unparsable slots fall back to 1.0."""
    weights = default_weights()
    for index, token in enumerate(text.split(",")[:FEATURE_COUNT]):
        try:
            weights[index] = float(token)
        except ValueError:
            weights[index] = DEFAULT_WEIGHT
    return weights


def format_weights(weights: Sequence[float]) -> str:
    return ",".join(f"{float(w):.6f}" for w in weights)


class LinearEvaluator:
    """Scores states as the dot product of their feature vector with ``weights``.

    ``weights`` is a float64 array of length 16 that training code updates in
    place; the evaluator only reads it at call time.
    """

    def __init__(self, weights: Optional[Sequence[float]] = None) -> None:
        if weights is None:
            self.weights = default_weights()
        else:
            array = np.asarray(weights, dtype=np.float64)
            if array.shape != (FEATURE_COUNT,):
                raise ValueError(f"Expected {FEATURE_COUNT} weights, got shape {array.shape}.")
            self.weights = array.copy()

    def get_features(self, state: GameState, for_player: Player) -> np.ndarray:
        return build_feature_vector(state, for_player)

    def evaluate(self, state: GameState, for_player: Player) -> float:
        return float(np.dot(self.get_features(state, for_player), self.weights))

    def __call__(self, state: GameState, for_player: Player) -> float:
        return self.evaluate(state, for_player)

    def set_weights(self, weights: Sequence[float]) -> None:
        self.weights[:] = np.asarray(weights, dtype=np.float64)

    def load_weights(self, path: PathLike) -> None:
        if not os.path.isfile(path):
            return
        # Undecodable bytes become bad tokens, which parse back to the default weight.
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            self.weights[:] = parse_weights(handle.read())

    def save_weights(self, path: PathLike) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(format_weights(self.weights))

    def copy(self) -> "LinearEvaluator":
        return LinearEvaluator(self.weights)

    def __repr__(self) -> str:
        return f"LinearEvaluator(weights=[{format_weights(self.weights)}])"
