from __future__ import annotations

from typing import Tuple

import numpy as np

from squadbattle.core import MAX_COOLDOWN_SUM, GameState, Player, PlayerState

FEATURE_NAMES: Tuple[str, ...] = (
    "hp_diff",
    "alive_diff",
    "mana_diff",
    "acted_diff",
    "ready_diff",
    "my_shield_walls",
    "my_power_infusions",
    "opp_bleeding",
    "stun_diff",
    "my_critical",
    "opening",
    "started_second",
    "my_turn",
    "cooldown_ready_diff",
    "opp_increased_damage",
    "opp_bleed_power",
)
FEATURE_COUNT = len(FEATURE_NAMES)

MAX_MANA = 20.0
MAX_PIECES = 8.0
OPENING_ROUNDS = 3
CRITICAL_HP_FRACTION = 0.25
DEBUFF_NORMALISER = 80.0  # eight units carrying a ten-point debuff


def cooldown_ready_ratio(player_state: PlayerState) -> float:
    """Mean of ``1 - cooldown_sum / 12`` over living units; 1.0 when none are alive."""
    ratios = [1.0 - piece.cooldown_sum / float(MAX_COOLDOWN_SUM) for _, piece in player_state.living()]
    if not ratios:
        return 1.0
    return float(np.mean(ratios))


def build_feature_vector(state: GameState, for_player: Player) -> np.ndarray:
    """Return the 16 features describing ``state`` from ``for_player``'s point of view."""
    for_player = Player(for_player)
    me = state.player_state(for_player)
    opp = state.player_state(for_player.opponent)

    max_hp_total = float(sum(p.max_hp for p in me.pieces) + sum(p.max_hp for p in opp.pieces))
    own_acted = sum(1 for p in me.pieces if p.has_acted_this_round)
    opp_acted = sum(1 for p in opp.pieces if p.has_acted_this_round)
    own_ready = sum(1 for p in me.pieces if p.is_ready)
    opp_ready = sum(1 for p in opp.pieces if p.is_ready)
    own_critical = sum(1 for p in me.pieces if p.hp > 0 and p.hp <= p.max_hp * CRITICAL_HP_FRACTION)
    is_player_one = for_player == Player.ONE

    features = np.zeros((FEATURE_COUNT,), dtype=np.float64)
    features[0] = (me.hp_total() - opp.hp_total()) / max_hp_total if max_hp_total else 0.0
    features[1] = (me.living_count() - opp.living_count()) / MAX_PIECES
    features[2] = (me.mana - opp.mana) / MAX_MANA
    features[3] = (own_acted - opp_acted) / MAX_PIECES
    features[4] = (own_ready - opp_ready) / MAX_PIECES
    features[5] = sum(1 for p in me.pieces if p.shield_wall_duration > 0) / MAX_PIECES
    features[6] = sum(1 for p in me.pieces if p.power_infusion_duration > 0) / MAX_PIECES
    features[7] = sum(1 for p in opp.pieces if p.bleed_duration > 0) / MAX_PIECES
    features[8] = (sum(1 for p in opp.pieces if p.is_stunned) - sum(1 for p in me.pieces if p.is_stunned)) / MAX_PIECES
    features[9] = own_critical / MAX_PIECES
    features[10] = 1.0 if state.round_number <= OPENING_ROUNDS else 0.0
    features[11] = 1.0 if state.round_starter_is_p1 != is_player_one else 0.0
    features[12] = 1.0 if state.is_player1_turn == is_player_one else 0.0
    features[13] = cooldown_ready_ratio(me) - cooldown_ready_ratio(opp)
    features[14] = sum(p.increased_damage_taken for p in opp.pieces) / DEBUFF_NORMALISER
    features[15] = sum(p.bleed_power for p in opp.pieces) / DEBUFF_NORMALISER
    return features

