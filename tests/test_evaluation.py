import numpy as np

from squadbattle.evaluation import evaluate_policies
from squadbattle.models import LinearEvaluator
from squadbattle.search import MinimaxConfig
from squadbattle.selfplay import MinimaxPolicy, RandomPolicy


def test_evaluate_random_vs_random_small():
    policy_a = RandomPolicy(np.random.default_rng(0))
    policy_b = RandomPolicy(np.random.default_rng(1))
    result = evaluate_policies(policy_a, policy_b, episodes=2, seed=0)
    assert result.games_played == 2
    assert result.player1_wins + result.player2_wins + result.ties == 2
    assert result.average_length > 0
    assert 0.0 <= result.winrate_player1() <= 1.0


def test_each_seat_is_played_by_its_own_policy():
    class Recording(RandomPolicy):
        def __init__(self, rng):
            super().__init__(rng)
            self.players = set()

        def act(self, state, player, legal_moves):
            self.players.add(player)
            return super().act(state, player, legal_moves)

    first = Recording(np.random.default_rng(2))
    second = Recording(np.random.default_rng(3))
    evaluate_policies(first, second, episodes=2, seed=1)

    assert {int(p) for p in first.players} == {1}
    assert {int(p) for p in second.players} == {2}


def test_minimax_against_random_finishes():
    searcher = MinimaxPolicy(LinearEvaluator(), MinimaxConfig(depth=1), rng=np.random.default_rng(0))
    result = evaluate_policies(searcher, RandomPolicy(np.random.default_rng(4)), episodes=2, seed=2)
    assert result.games_played == 2
    assert result.winrate_player1() + result.winrate_player2() <= 1.0
