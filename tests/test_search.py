import math

import numpy as np
import pytest

from squadbattle.core import (
    GameState,
    PieceState,
    PieceType,
    Player,
    PlayerState,
    SpellType,
    apply_move,
    generate_legal_moves,
    initialize_game_state,
    is_terminal,
)
from squadbattle.models import LinearEvaluator
from squadbattle.search import MinimaxConfig, MinimaxSolver


def small_state() -> GameState:
    def side():
        return PlayerState(
            pieces=(
                PieceState(id=0, type=PieceType.TANK, hp=27, max_hp=27),
                PieceState(id=1, type=PieceType.HEALER, hp=18, max_hp=18),
                PieceState(id=2, type=PieceType.TANK, hp=27, max_hp=27),
            ),
            mana=12,
        )

    return GameState(player1=side(), player2=side(), is_player1_turn=True)


def test_depth_one_prefers_a_spell_over_passing():
    evaluator = LinearEvaluator()
    solver = MinimaxSolver(evaluator, MinimaxConfig(depth=1), rng=np.random.default_rng(0))
    state = initialize_game_state()

    result = solver.search(state, Player.ONE)

    assert result.move in generate_legal_moves(state, Player.ONE)
    assert not result.move.is_pass
    assert result.nodes_visited == len(generate_legal_moves(state, Player.ONE))


@pytest.mark.parametrize(
    "state_factory,depth",
    [(initialize_game_state, 2), (initialize_game_state, 3), (small_state, 3)],
)
def test_alpha_beta_matches_plain_minimax(state_factory, depth):
    evaluator = LinearEvaluator(np.random.default_rng(5).normal(size=16))
    state = state_factory()

    pruned = MinimaxSolver(evaluator, MinimaxConfig(depth=depth, alpha_beta=True))
    plain = MinimaxSolver(evaluator, MinimaxConfig(depth=depth, alpha_beta=False))
    pruned_result = pruned.search(state, Player.ONE)
    plain_result = plain.search(state, Player.ONE)

    assert pruned_result.move == plain_result.move
    assert pruned_result.value == pytest.approx(plain_result.value)
    assert pruned_result.nodes_visited <= plain_result.nodes_visited


def test_search_finds_the_killing_blow():
    p1 = PlayerState(pieces=(PieceState(id=0, type=PieceType.TANK, hp=27, max_hp=27),), mana=20)
    p2 = PlayerState(
        pieces=(
            PieceState(id=0, type=PieceType.HEALER, hp=18, max_hp=18),
            PieceState(id=1, type=PieceType.HEALER, hp=3, max_hp=18),
        ),
        mana=20,
    )
    state = GameState(player1=p1, player2=p2, is_player1_turn=True)

    def kills_first(s, player):
        return float(s.player_state(player.opponent).living_count() == 1)

    solver = MinimaxSolver(kills_first, MinimaxConfig(depth=3))
    move = solver.get_best_move(state, Player.ONE)

    assert move.target_player == Player.TWO and move.target_index == 1
    assert move.spell in (SpellType.THUNDERCLAP, SpellType.REND)
    assert apply_move(state, move).player2.pieces[1].hp == 0


def test_terminal_children_are_scored_by_the_evaluator():
    p1 = PlayerState(pieces=(PieceState(id=0, type=PieceType.DPS, hp=22, max_hp=22),), mana=20)
    p2 = PlayerState(pieces=(PieceState(id=0, type=PieceType.HEALER, hp=2, max_hp=18),), mana=20)
    state = GameState(player1=p1, player2=p2, is_player1_turn=True)
    calls = []

    def recorder(s, player):
        calls.append(is_terminal(s)[0])
        return 0.0

    MinimaxSolver(recorder, MinimaxConfig(depth=4)).search(state, Player.ONE)

    # Every spell kills the last enemy, so each of those children is a terminal leaf.
    spells = [m for m in generate_legal_moves(state, Player.ONE) if not m.is_pass]
    assert calls.count(True) >= len(spells)


def test_no_eligible_unit_returns_no_move():
    p1 = PlayerState(pieces=(PieceState(id=0, type=PieceType.TANK, hp=27, max_hp=27, is_stunned=True),), mana=20)
    p2 = PlayerState(pieces=(PieceState(id=0, type=PieceType.TANK, hp=27, max_hp=27),), mana=20)
    state = GameState(player1=p1, player2=p2, is_player1_turn=True)

    result = MinimaxSolver(LinearEvaluator()).search(state, Player.ONE)
    assert result.move is None
    assert result.value == -math.inf


def test_search_leaves_state_and_weights_untouched():
    evaluator = LinearEvaluator()
    state = initialize_game_state()
    before = evaluator.weights.copy()

    MinimaxSolver(evaluator, MinimaxConfig(depth=2)).search(state, Player.ONE)

    np.testing.assert_array_equal(evaluator.weights, before)
    assert state == initialize_game_state()
