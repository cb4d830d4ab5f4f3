"""Evaluation helpers for squadbattle policies."""

from .match import EvaluationResult, evaluate_policies

__all__ = ["EvaluationResult", "evaluate_policies"]
