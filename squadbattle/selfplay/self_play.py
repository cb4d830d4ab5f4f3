from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from squadbattle.core import (
    GameResult,
    GameState,
    Move,
    Player,
    apply_move,
    generate_legal_moves,
    initialize_game_state,
    is_terminal,
)
from squadbattle.models import LinearEvaluator
from squadbattle.search import MinimaxConfig, MinimaxSolver


class Policy:
    """Policy interface choosing one of the legal moves for ``player``."""

    def act(self, state: GameState, player: Player, legal_moves: Sequence[Move]) -> Move:
        raise NotImplementedError

    def spawn(self, seed: Optional[int] = None) -> "Policy":
        """Return a copy of this policy for parallel execution."""
        return self


class RandomPolicy(Policy):
    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng or np.random.default_rng()

    def act(self, state: GameState, player: Player, legal_moves: Sequence[Move]) -> Move:
        if not legal_moves:
            raise ValueError("No legal moves to choose from.")
        return legal_moves[int(self.rng.integers(len(legal_moves)))]

    def spawn(self, seed: Optional[int] = None) -> "RandomPolicy":
        return RandomPolicy(np.random.default_rng(seed))


class MinimaxPolicy(Policy):
    def __init__(
        self,
        evaluator: LinearEvaluator,
        config: Optional[MinimaxConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.evaluator = evaluator
        self._config = deepcopy(config) if config else MinimaxConfig()
        self.rng = rng or np.random.default_rng()
        self.solver = MinimaxSolver(evaluator.evaluate, config=self._config, rng=self.rng)

    def act(self, state: GameState, player: Player, legal_moves: Sequence[Move]) -> Move:
        move = self.solver.get_best_move(state, player)
        if move is None:
            return legal_moves[int(self.rng.integers(len(legal_moves)))]
        return move

    def spawn(self, seed: Optional[int] = None) -> "MinimaxPolicy":
        # Spawned copies share the evaluator, so they always see the current weights.
        return MinimaxPolicy(self.evaluator, config=self._config, rng=np.random.default_rng(seed))


class EpsilonGreedyPolicy(Policy):
    """Plays a uniformly random legal move with probability ``epsilon``, else defers to ``base``."""

    def __init__(
        self,
        base: Policy,
        epsilon: float,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.base = base
        self.epsilon = float(epsilon)
        self.rng = rng or np.random.default_rng()

    def act(self, state: GameState, player: Player, legal_moves: Sequence[Move]) -> Move:
        if self.rng.random() < self.epsilon:
            return legal_moves[int(self.rng.integers(len(legal_moves)))]
        return self.base.act(state, player, legal_moves)

    def spawn(self, seed: Optional[int] = None) -> "EpsilonGreedyPolicy":
        return EpsilonGreedyPolicy(self.base.spawn(seed), self.epsilon, rng=np.random.default_rng(seed))


def make_minimax_policy(
    evaluator: LinearEvaluator,
    depth: int = 3,
    *,
    epsilon: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> Policy:
    rng = rng or np.random.default_rng()
    policy: Policy = MinimaxPolicy(evaluator, MinimaxConfig(depth=depth), rng=rng)
    if epsilon > 0.0:
        policy = EpsilonGreedyPolicy(policy, epsilon, rng=rng)
    return policy


@dataclass
class TrajectoryStep:
    state: GameState
    features: np.ndarray
    actor: Player


@dataclass
class GameRecord:
    steps: List[TrajectoryStep]
    result: GameResult
    player1_starts: bool
    final_state: GameState
    moves: int = field(init=False)

    def __post_init__(self) -> None:
        self.moves = len(self.steps)


class SelfPlayManager:
    def __init__(
        self,
        evaluator: LinearEvaluator,
        policy: Optional[Policy] = None,
        *,
        seed: Optional[int] = None,
    ) -> None:
        self.evaluator = evaluator
        self.rng = np.random.default_rng(seed)
        self.policy = policy or RandomPolicy(self.rng)

    def play_game(
        self,
        player1_starts: bool = True,
        *,
        policy: Optional[Policy] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> GameRecord:
        """Play one game to completion, recording the mover's features before each move."""
        policy = policy or self.policy
        rng = rng or self.rng
        state = initialize_game_state(player1_starts)
        steps: List[TrajectoryStep] = []

        terminal, result = is_terminal(state)
        while not terminal:
            actor = state.current_player
            legal = generate_legal_moves(state, actor) or [Move.pass_move(actor)]
            move = policy.act(state, actor, legal)
            steps.append(TrajectoryStep(state, self.evaluator.get_features(state, actor), actor))
            state = apply_move(state, move, rng=rng)
            terminal, result = is_terminal(state)

        return GameRecord(steps=steps, result=result, player1_starts=player1_starts, final_state=state)

    def generate(self, episodes: int, workers: int = 1, *, first_game_index: int = 0) -> List[GameRecord]:
        """Play ``episodes`` games; player 1 starts the even-indexed ones."""
        starts = [(first_game_index + i) % 2 == 0 for i in range(episodes)]
        if workers <= 1:
            return [self.play_game(p1_starts) for p1_starts in starts]

        chunks = [starts[i::workers] for i in range(workers)]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = []
            for chunk in chunks:
                if not chunk:
                    continue
                seed = int(self.rng.integers(2**32))
                futures.append(executor.submit(self._run_worker, self.policy.spawn(seed), chunk, seed))
            records: List[GameRecord] = []
            for future in futures:
                records.extend(future.result())
        return records

    def _run_worker(self, policy: Policy, starts: Sequence[bool], seed: int) -> List[GameRecord]:
        rng = np.random.default_rng(seed)
        return [self.play_game(p1_starts, policy=policy, rng=rng) for p1_starts in starts]


def summarize_records(records: Sequence[GameRecord]) -> Dict[str, object]:
    stats: Dict[str, object] = {
        "games_played": len(records),
        "player1_wins": sum(1 for r in records if r.result == GameResult.PLAYER1_WIN),
        "player2_wins": sum(1 for r in records if r.result == GameResult.PLAYER2_WIN),
        "ties": sum(1 for r in records if r.result == GameResult.TIE),
    }
    stats["average_moves"] = float(np.mean([r.moves for r in records])) if records else 0.0
    return stats
