"""Self-play policies and game generation."""

from .self_play import (
    EpsilonGreedyPolicy,
    GameRecord,
    MinimaxPolicy,
    Policy,
    RandomPolicy,
    SelfPlayManager,
    TrajectoryStep,
    make_minimax_policy,
    summarize_records,
)

__all__ = [
    "EpsilonGreedyPolicy",
    "GameRecord",
    "MinimaxPolicy",
    "Policy",
    "RandomPolicy",
    "SelfPlayManager",
    "TrajectoryStep",
    "make_minimax_policy",
    "summarize_records",
]
