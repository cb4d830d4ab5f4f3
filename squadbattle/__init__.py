"""Squad battle rules engine, linear evaluator and minimax search."""

from . import core, features, models, search, selfplay, training, orchestration, evaluation
from .core import (
    GameResult,
    GameState,
    Move,
    PieceState,
    PieceType,
    Player,
    PlayerState,
    SpellType,
    apply_move,
    generate_legal_moves,
    initialize_game_state,
    is_terminal,
    tick_round,
)
from .features import FEATURE_COUNT, FEATURE_NAMES, build_feature_vector
from .models import LinearEvaluator
from .search import MinimaxConfig, MinimaxSolver, SearchResult
from .selfplay import (
    EpsilonGreedyPolicy,
    MinimaxPolicy,
    RandomPolicy,
    SelfPlayManager,
    make_minimax_policy,
)
from .training import TDConfig, TDTrainer
from .evaluation import EvaluationResult, evaluate_policies
from .orchestration import SelfPlayTrainer, SelfPlayTrainerConfig

__all__ = [
    "core",
    "features",
    "models",
    "search",
    "selfplay",
    "training",
    "orchestration",
    "evaluation",
    "GameResult",
    "GameState",
    "Move",
    "PieceState",
    "PieceType",
    "Player",
    "PlayerState",
    "SpellType",
    "apply_move",
    "generate_legal_moves",
    "initialize_game_state",
    "is_terminal",
    "tick_round",
    "FEATURE_COUNT",
    "FEATURE_NAMES",
    "build_feature_vector",
    "LinearEvaluator",
    "MinimaxConfig",
    "MinimaxSolver",
    "SearchResult",
    "EpsilonGreedyPolicy",
    "MinimaxPolicy",
    "RandomPolicy",
    "SelfPlayManager",
    "make_minimax_policy",
    "TDConfig",
    "TDTrainer",
    "EvaluationResult",
    "evaluate_policies",
    "SelfPlayTrainer",
    "SelfPlayTrainerConfig",
]
