from __future__ import annotations

import json

import pytest

from text_al_pipeline.config import load_experiment_config, save_experiment_config


def _raw_config(**overrides):
    raw = {
        "experiment_name": "attacks_smoke",
        "output_root": "runs",
        "dataset": {
            "name": "attacks",
            "path": "data/attacks.csv",
            "id_column": "rev_id",
            "text_column": "comment",
            "label_column": "attack",
            "version": "1.0",
        },
        "features": {"min_termfreq": 2, "min_docfreq": 2, "stopwords": ["the"]},
        "model": {"n_lambdas": 10, "n_folds": 5, "lambda_rule": "lambda_min"},
        "parallel": {"n_jobs": 2},
        "strategy_name": "uncertainty",
        "strategy_params": {"tie_break": "stable"},
        "rounds": 2,
        "query_size": 8,
        "seeds": [7],
        "bootstrap": {"initial_labeled_size": 10, "test_size": 20, "pool_size": 100},
    }
    raw.update(overrides)
    return raw


def _write(tmp_path, raw, name="exp.json"):
    path = tmp_path / name
    path.write_text(json.dumps(raw), encoding="utf-8")
    return path


def test_config_load_and_round_trip(tmp_path):
    config = load_experiment_config(_write(tmp_path, _raw_config()))
    assert config.experiment_name == "attacks_smoke"
    assert config.dataset.text_column == "comment"
    assert config.features.stopwords == ("the",)
    assert config.model.lambda_rule == "lambda_min"
    assert config.parallel.n_jobs == 2
    assert config.bootstrap.pool_size == 100

    round_trip_path = tmp_path / "exp_out.json"
    save_experiment_config(config, round_trip_path)
    loaded = load_experiment_config(round_trip_path)
    assert loaded.to_dict() == config.to_dict()


def test_config_defaults(tmp_path):
    raw = {
        "experiment_name": "minimal",
        "dataset": {"name": "attacks", "path": "data/attacks.csv"},
    }
    config = load_experiment_config(_write(tmp_path, raw))
    assert config.strategy_name == "uncertainty"
    assert config.model.lambda_rule == "lambda_1se"
    assert config.parallel.n_jobs == 1
    assert config.bootstrap.pool_size is None


def test_config_rejects_unknown_strategy_name(tmp_path):
    path = _write(tmp_path, _raw_config(strategy_name="entropy"))
    with pytest.raises(ValueError, match="strategy_name must be one of"):
        load_experiment_config(path)


def test_config_rejects_unknown_tie_break(tmp_path):
    path = _write(tmp_path, _raw_config(strategy_params={"tie_break": "first"}))
    with pytest.raises(ValueError, match="tie_break must be one of"):
        load_experiment_config(path)


def test_config_rejects_bootstrap_without_unlabeled_room(tmp_path):
    raw = _raw_config(
        bootstrap={"initial_labeled_size": 50, "test_size": 50, "pool_size": 100}
    )
    with pytest.raises(ValueError, match="consume the full pool"):
        load_experiment_config(_write(tmp_path, raw))


def test_config_rejects_non_json(tmp_path):
    path = tmp_path / "exp.yaml"
    path.write_text("experiment_name: x", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON"):
        load_experiment_config(path)


def test_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_experiment_config(tmp_path / "missing.json")
