"""Depth-limited minimax with optional alpha-beta pruning.

Depth counts plies (single-unit activations). Both bounds of the search bottom
out in the evaluator, including at terminal states, so wins and losses at the
horizon are scored by the same feature weights as every other leaf.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from squadbattle.core import (
    GameState,
    Move,
    Player,
    apply_move,
    generate_legal_moves,
    is_terminal,
)

logger = logging.getLogger(__name__)

EvaluationFn = Callable[[GameState, Player], float]


@dataclass
class MinimaxConfig:
    depth: int = 3
    alpha_beta: bool = True


@dataclass
class SearchResult:
    move: Optional[Move]
    value: float
    nodes_visited: int


class MinimaxSolver:
    def __init__(
        self,
        evaluator: EvaluationFn,
        config: Optional[MinimaxConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.evaluator = evaluator
        self.config = config or MinimaxConfig()
        self.rng = rng or np.random.default_rng()
        self.nodes_visited = 0

    # ------------------------------------------------------------------
    def search(self, state: GameState, for_player: Player, depth: Optional[int] = None) -> SearchResult:
        for_player = Player(for_player)
        depth = self.config.depth if depth is None else depth
        self.nodes_visited = 0

        best_score = -math.inf
        best_move: Optional[Move] = None
        for move in generate_legal_moves(state, for_player):
            next_state = apply_move(state, move, rng=self.rng)
            score = self._min_value(next_state, depth - 1, -math.inf, math.inf, for_player)
            if score > best_score or best_move is None:
                best_score = score
                best_move = move

        logger.debug(
            "minimax player=%s depth=%d nodes=%d best=%s value=%.4f",
            for_player.name,
            depth,
            self.nodes_visited,
            best_move,
            best_score,
        )
        return SearchResult(move=best_move, value=best_score, nodes_visited=self.nodes_visited)

    def get_best_move(self, state: GameState, for_player: Player, depth: Optional[int] = None) -> Optional[Move]:
        return self.search(state, for_player, depth).move

    # ------------------------------------------------------------------
    def _max_value(self, state: GameState, depth: int, alpha: float, beta: float, for_player: Player) -> float:
        self.nodes_visited += 1
        if depth <= 0 or is_terminal(state)[0]:
            return self.evaluator(state, for_player)

        value = -math.inf
        for move in self._expand(state, for_player):
            next_state = apply_move(state, move, rng=self.rng)
            value = max(value, self._min_value(next_state, depth - 1, alpha, beta, for_player))
            if self.config.alpha_beta:
                if value >= beta:
                    return value
                alpha = max(alpha, value)
        return value

    def _min_value(self, state: GameState, depth: int, alpha: float, beta: float, for_player: Player) -> float:
        self.nodes_visited += 1
        if depth <= 0 or is_terminal(state)[0]:
            return self.evaluator(state, for_player)

        value = math.inf
        for move in self._expand(state, for_player.opponent):
            next_state = apply_move(state, move, rng=self.rng)
            value = min(value, self._max_value(next_state, depth - 1, alpha, beta, for_player))
            if self.config.alpha_beta:
                if value <= alpha:
                    return value
                beta = min(beta, value)
        return value

    def _expand(self, state: GameState, player: Player) -> List[Move]:
        # A side with nobody left to activate passes, as a game driver would.
        return generate_legal_moves(state, player) or [Move.pass_move(player)]
