from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TextIO

import numpy as np

from squadbattle.core import GameResult
from squadbattle.features import FEATURE_COUNT
from squadbattle.models import LinearEvaluator, format_weights
from squadbattle.search import MinimaxConfig
from squadbattle.selfplay import EpsilonGreedyPolicy, MinimaxPolicy, SelfPlayManager
from squadbattle.training import TDConfig, TDTrainer

logger = logging.getLogger(__name__)

LOG_HEADER = [
    "game",
    "alpha",
    "gamma",
    "depth",
    "p1FirstWins",
    "p2FirstWins",
    "p1SecondWins",
    "p2SecondWins",
    "ties",
] + [f"w{i}" for i in range(FEATURE_COUNT)]

ProgressFn = Callable[[int, int, Dict[str, int]], None]


@dataclass
class SelfPlayTrainerConfig:
    num_games: int = 1000
    search_depth: int = 3
    td_config: TDConfig = field(default_factory=TDConfig)
    epsilon_start: float = 0.20
    epsilon_end: float = 0.05
    anneal_games: int = 20000
    report_every: int = 1000
    weights_path: Optional[str] = "weights.csv"
    log_path: Optional[str] = "training_log.csv"
    covariance_path: Optional[str] = "covariance.csv"
    seed: Optional[int] = None
    wandb_project: Optional[str] = None
    wandb_run_name: Optional[str] = None
    wandb_entity: Optional[str] = None


@dataclass
class ResultTally:
    p1_first_wins: int = 0
    p2_first_wins: int = 0
    p1_second_wins: int = 0
    p2_second_wins: int = 0
    ties: int = 0

    def record(self, result: GameResult, player1_starts: bool) -> None:
        if result == GameResult.TIE or result == GameResult.ONGOING:
            self.ties += 1
        elif player1_starts:
            if result == GameResult.PLAYER1_WIN:
                self.p1_first_wins += 1
            else:
                self.p2_second_wins += 1
        else:
            if result == GameResult.PLAYER2_WIN:
                self.p2_first_wins += 1
            else:
                self.p1_second_wins += 1

    @property
    def games(self) -> int:
        return self.p1_first_wins + self.p2_first_wins + self.p1_second_wins + self.p2_second_wins + self.ties

    def as_dict(self) -> Dict[str, int]:
        return {
            "p1_first_wins": self.p1_first_wins,
            "p2_first_wins": self.p2_first_wins,
            "p1_second_wins": self.p1_second_wins,
            "p2_second_wins": self.p2_second_wins,
            "ties": self.ties,
        }


class SelfPlayTrainer:
    """Plays epsilon-greedy minimax self-play games and TD-updates the evaluator after each."""

    def __init__(
        self,
        config: SelfPlayTrainerConfig = SelfPlayTrainerConfig(),
        *,
        evaluator: Optional[LinearEvaluator] = None,
    ) -> None:
        self.config = config
        self.evaluator = evaluator or LinearEvaluator()
        if config.weights_path:
            self.evaluator.load_weights(config.weights_path)

        self.rng = np.random.default_rng(config.seed)
        self.search_policy = MinimaxPolicy(
            self.evaluator,
            MinimaxConfig(depth=config.search_depth),
            rng=self.rng,
        )
        # Blastwave sampling gets its own stream, split off the exploration generator.
        self.self_play = SelfPlayManager(self.evaluator, self.search_policy, seed=int(self.rng.integers(2**32)))
        self.trainer = TDTrainer(self.evaluator, config.td_config)

        self.tally = ResultTally()
        self.weight_snapshots: List[np.ndarray] = []
        self.game_index = 0
        self._last_logged_game = 0

        self.wandb_run = None
        self._wandb = None
        if config.wandb_project:
            try:
                import wandb
            except ImportError as exc:
                raise RuntimeError("wandb is not installed but wandb_project is set") from exc
            self._wandb = wandb
            self.wandb_run = wandb.init(
                project=config.wandb_project,
                name=config.wandb_run_name,
                entity=config.wandb_entity,
                config={
                    "num_games": config.num_games,
                    "search_depth": config.search_depth,
                    "td": vars(config.td_config),
                    "epsilon_start": config.epsilon_start,
                    "epsilon_end": config.epsilon_end,
                    "anneal_games": config.anneal_games,
                },
            )

        self._log_handle: Optional[TextIO] = None
        self._log_writer = None
        if config.log_path:
            log_dir = os.path.dirname(config.log_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            self._log_handle = open(config.log_path, "w", encoding="utf-8", newline="")
            self._log_writer = csv.writer(self._log_handle)
            self._log_writer.writerow(LOG_HEADER)

    # ------------------------------------------------------------------
    def epsilon_for(self, game_index: int) -> float:
        cfg = self.config
        if cfg.anneal_games <= 0 or game_index >= cfg.anneal_games:
            return cfg.epsilon_end
        return cfg.epsilon_start + (cfg.epsilon_end - cfg.epsilon_start) * (game_index / cfg.anneal_games)

    def play_and_learn(self) -> Dict[str, object]:
        game = self.game_index
        epsilon = self.epsilon_for(game)
        player1_starts = game % 2 == 0
        policy = EpsilonGreedyPolicy(self.search_policy, epsilon, rng=self.rng)

        record = self.self_play.play_game(player1_starts, policy=policy)
        output = self.trainer.update(record)
        self.tally.record(record.result, player1_starts)
        self.weight_snapshots.append(self.evaluator.weights.copy())
        self.game_index += 1

        if self.wandb_run and self._wandb:
            log_data = {f"td/{k}": v for k, v in output.as_dict().items()}
            log_data.update({f"tally/{k}": v for k, v in self.tally.as_dict().items()})
            log_data["self_play/moves"] = record.moves
            log_data["self_play/epsilon"] = epsilon
            self._wandb.log(log_data, step=game)

        if self.config.report_every > 0 and self.game_index % self.config.report_every == 0:
            self._report()

        return {
            "game": self.game_index,
            "result": record.result.value,
            "moves": record.moves,
            "epsilon": epsilon,
            "td": output.as_dict(),
        }

    def run(self, num_games: Optional[int] = None, progress: Optional[ProgressFn] = None) -> Dict[str, object]:
        total = self.config.num_games if num_games is None else num_games
        for _ in range(total):
            self.play_and_learn()
            if progress is not None:
                progress(self.game_index, total, self.tally.as_dict())
        if self._last_logged_game != self.game_index:
            self._report()

        if self.config.weights_path:
            self.evaluator.save_weights(self.config.weights_path)
            logger.info("weights saved to %s", self.config.weights_path)
        if self.config.covariance_path and len(self.weight_snapshots) >= 2:
            self.save_covariance(self.config.covariance_path)
            logger.info("covariance matrix saved to %s", self.config.covariance_path)

        return {
            "games": self.game_index,
            "tally": self.tally.as_dict(),
            "weights": self.evaluator.weights.tolist(),
        }

    # ------------------------------------------------------------------
    def covariance(self) -> np.ndarray:
        if len(self.weight_snapshots) < 2:
            raise ValueError("At least two weight snapshots are needed for a covariance matrix.")
        return np.cov(np.stack(self.weight_snapshots, axis=0), rowvar=False)

    def save_covariance(self, path: str) -> str:
        np.savetxt(path, self.covariance(), fmt="%.6f", delimiter=",")
        return path

    def _report(self) -> None:
        self._last_logged_game = self.game_index
        td = self.config.td_config
        if self._log_writer is not None and self._log_handle is not None:
            t = self.tally
            self._log_writer.writerow(
                [
                    self.game_index,
                    td.alpha,
                    td.gamma,
                    self.config.search_depth,
                    t.p1_first_wins,
                    t.p2_first_wins,
                    t.p1_second_wins,
                    t.p2_second_wins,
                    t.ties,
                ]
                + format_weights(self.evaluator.weights).split(",")
            )
            self._log_handle.flush()
        logger.info(
            "after %d games: tally=%s weights=%s",
            self.game_index,
            self.tally.as_dict(),
            ", ".join(f"{w:.4f}" for w in self.evaluator.weights),
        )

    def close(self) -> None:
        if self._log_handle is not None:
            self._log_handle.close()
            self._log_handle = None
            self._log_writer = None
        if self.wandb_run is not None:
            self.wandb_run.finish()
            self.wandb_run = None
