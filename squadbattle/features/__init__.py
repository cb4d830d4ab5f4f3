"""Feature extraction helpers for the linear evaluator."""

from .observation import (
    DEBUFF_NORMALISER,
    FEATURE_COUNT,
    FEATURE_NAMES,
    MAX_MANA,
    MAX_PIECES,
    build_feature_vector,
    cooldown_ready_ratio,
)

__all__ = [
    "DEBUFF_NORMALISER",
    "FEATURE_COUNT",
    "FEATURE_NAMES",
    "MAX_MANA",
    "MAX_PIECES",
    "build_feature_vector",
    "cooldown_ready_ratio",
]
