from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from squadbattle.core import GameResult, Player
from squadbattle.models import LinearEvaluator
from squadbattle.selfplay import Policy, SelfPlayManager


@dataclass
class EvaluationResult:
    games_played: int
    player1_wins: int
    player2_wins: int
    ties: int
    average_length: float

    def winrate_player1(self) -> float:
        return self.player1_wins / max(1, self.games_played)

    def winrate_player2(self) -> float:
        return self.player2_wins / max(1, self.games_played)


class _SeatedPolicy(Policy):
    """Routes each decision to the policy seated for the acting player."""

    def __init__(self, policy_p1: Policy, policy_p2: Policy) -> None:
        self.policy_p1 = policy_p1
        self.policy_p2 = policy_p2

    def act(self, state, player, legal_moves):
        policy = self.policy_p1 if player == Player.ONE else self.policy_p2
        return policy.act(state, player, legal_moves)


def evaluate_policies(
    policy_p1: Policy,
    policy_p2: Policy,
    *,
    episodes: int,
    alternate_start: bool = True,
    seed: Optional[int] = None,
) -> EvaluationResult:
    """Play ``episodes`` games between two fixed seats.

    With ``alternate_start`` the starting side swaps every game, so neither
    policy keeps the first-activation advantage.
    """
    manager = SelfPlayManager(LinearEvaluator(), _SeatedPolicy(policy_p1, policy_p2), seed=seed)

    player1_wins = 0
    player2_wins = 0
    ties = 0
    lengths = []
    for game in range(episodes):
        player1_starts = game % 2 == 0 if alternate_start else True
        record = manager.play_game(player1_starts)
        lengths.append(record.moves)
        if record.result == GameResult.PLAYER1_WIN:
            player1_wins += 1
        elif record.result == GameResult.PLAYER2_WIN:
            player2_wins += 1
        else:
            ties += 1

    return EvaluationResult(
        games_played=episodes,
        player1_wins=player1_wins,
        player2_wins=player2_wins,
        ties=ties,
        average_length=float(np.mean(lengths)) if lengths else 0.0,
    )
