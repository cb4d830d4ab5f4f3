import csv
import os
import sys

import numpy as np
import pytest

from squadbattle.core import GameResult
from squadbattle.features import FEATURE_COUNT
from squadbattle.models import format_weights
from squadbattle.orchestration import ResultTally, SelfPlayTrainer, SelfPlayTrainerConfig
from squadbattle.orchestration.loop import LOG_HEADER
from squadbattle.training import TDConfig


def make_config(tmp_path, **overrides):
    params = dict(
        num_games=2,
        search_depth=1,
        td_config=TDConfig(alpha=0.001, gamma=0.95),
        report_every=1,
        weights_path=(tmp_path / "weights.csv").as_posix(),
        log_path=(tmp_path / "logs" / "training_log.csv").as_posix(),
        covariance_path=(tmp_path / "covariance.csv").as_posix(),
        seed=0,
    )
    params.update(overrides)
    return SelfPlayTrainerConfig(**params)


def test_result_tally_splits_by_starting_side():
    tally = ResultTally()
    tally.record(GameResult.PLAYER1_WIN, player1_starts=True)
    tally.record(GameResult.PLAYER2_WIN, player1_starts=True)
    tally.record(GameResult.PLAYER2_WIN, player1_starts=False)
    tally.record(GameResult.PLAYER1_WIN, player1_starts=False)
    tally.record(GameResult.TIE, player1_starts=False)

    assert tally.as_dict() == {
        "p1_first_wins": 1,
        "p2_first_wins": 1,
        "p1_second_wins": 1,
        "p2_second_wins": 1,
        "ties": 1,
    }
    assert tally.games == 5


def test_epsilon_anneals_linearly(tmp_path):
    trainer = SelfPlayTrainer(make_config(tmp_path, epsilon_start=0.2, epsilon_end=0.05, anneal_games=100))
    try:
        assert trainer.epsilon_for(0) == pytest.approx(0.2)
        assert trainer.epsilon_for(50) == pytest.approx(0.125)
        assert trainer.epsilon_for(100) == pytest.approx(0.05)
        assert trainer.epsilon_for(10_000) == pytest.approx(0.05)
    finally:
        trainer.close()


def test_run_writes_log_weights_and_covariance(tmp_path):
    config = make_config(tmp_path)
    trainer = SelfPlayTrainer(config)
    try:
        summary = trainer.run()
    finally:
        trainer.close()

    assert summary["games"] == 2
    assert sum(summary["tally"].values()) == 2

    with open(config.log_path, newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == LOG_HEADER
    assert [row[0] for row in rows[1:]] == ["1", "2"]
    assert all(len(row) == len(LOG_HEADER) for row in rows)
    assert rows[1][3] == "1"

    saved = (tmp_path / "weights.csv").read_text(encoding="utf-8")
    assert saved == format_weights(trainer.evaluator.weights)

    covariance = np.loadtxt(config.covariance_path, delimiter=",")
    assert covariance.shape == (FEATURE_COUNT, FEATURE_COUNT)
    np.testing.assert_allclose(covariance, covariance.T, atol=1e-6)


def test_trainer_resumes_from_saved_weights(tmp_path):
    path = tmp_path / "weights.csv"
    path.write_text(",".join(["0.5"] * FEATURE_COUNT), encoding="utf-8")

    trainer = SelfPlayTrainer(make_config(tmp_path, log_path=None, covariance_path=None))
    try:
        np.testing.assert_array_equal(trainer.evaluator.weights, np.full(FEATURE_COUNT, 0.5))
        info = trainer.play_and_learn()
    finally:
        trainer.close()

    assert info["game"] == 1
    assert info["moves"] > 0
    assert info["epsilon"] == pytest.approx(0.2)


def test_covariance_needs_two_snapshots(tmp_path):
    trainer = SelfPlayTrainer(make_config(tmp_path, log_path=None))
    try:
        with pytest.raises(ValueError):
            trainer.covariance()
    finally:
        trainer.close()


def test_self_play_stream_differs_from_exploration_stream(tmp_path):
    trainer = SelfPlayTrainer(make_config(tmp_path, log_path=None, seed=7))
    try:
        exploration = np.random.default_rng(7).random(4)
        sampling = trainer.self_play.rng.random(4)
        assert not np.allclose(exploration, sampling)
    finally:
        trainer.close()


def test_missing_wandb_leaves_no_open_log(tmp_path, monkeypatch):
    monkeypatch.setitem(sys.modules, "wandb", None)
    config = make_config(tmp_path, wandb_project="squadbattle")

    with pytest.raises(RuntimeError):
        SelfPlayTrainer(config)

    assert not os.path.exists(config.log_path)
