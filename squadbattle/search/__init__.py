"""Adversarial search utilities."""

from .minimax import MinimaxConfig, MinimaxSolver, SearchResult

__all__ = ["MinimaxConfig", "MinimaxSolver", "SearchResult"]
