"""Evaluation models for squadbattle."""

from .linear import (
    DEFAULT_WEIGHT,
    LinearEvaluator,
    default_weights,
    format_weights,
    parse_weights,
)

__all__ = [
    "DEFAULT_WEIGHT",
    "LinearEvaluator",
    "default_weights",
    "format_weights",
    "parse_weights",
]
