"""High-level training orchestration utilities."""

from .loop import ResultTally, SelfPlayTrainer, SelfPlayTrainerConfig

__all__ = ["ResultTally", "SelfPlayTrainer", "SelfPlayTrainerConfig"]
