"""Core game logic: state model, spell tables and the rules engine."""

from .state import (
    AOE_TARGET_INDEX,
    GameResult,
    GameState,
    Move,
    PieceState,
    PieceType,
    Player,
    PlayerState,
    SpellType,
)
from .spells import (
    MANA_REGEN,
    MAX_COOLDOWN_SUM,
    SPELLS,
    STALL_LIMIT,
    SpellSpec,
    TargetShape,
    spell_spec,
    spells_for,
)
from .rules import (
    DEFAULT_ROSTER,
    ROSTER_SIZE,
    STARTING_MANA,
    all_acted,
    apply_move,
    calculate_damage,
    find_actor,
    game_result,
    generate_legal_moves,
    initialize_game_state,
    is_terminal,
    make_default_player,
    tick_round,
)

__all__ = [
    "AOE_TARGET_INDEX",
    "GameResult",
    "GameState",
    "Move",
    "PieceState",
    "PieceType",
    "Player",
    "PlayerState",
    "SpellType",
    "MANA_REGEN",
    "MAX_COOLDOWN_SUM",
    "SPELLS",
    "STALL_LIMIT",
    "SpellSpec",
    "TargetShape",
    "spell_spec",
    "spells_for",
    "DEFAULT_ROSTER",
    "ROSTER_SIZE",
    "STARTING_MANA",
    "all_acted",
    "apply_move",
    "calculate_damage",
    "find_actor",
    "game_result",
    "generate_legal_moves",
    "initialize_game_state",
    "is_terminal",
    "make_default_player",
    "tick_round",
]
