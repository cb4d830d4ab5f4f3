"""Temporal-difference training of the linear evaluator."""

from .loop import TDConfig, TDStepOutput, TDTrainer, terminal_reward

__all__ = ["TDConfig", "TDStepOutput", "TDTrainer", "terminal_reward"]
