from __future__ import annotations

import csv
import json

import pandas as pd
import pytest

from text_al_pipeline.config import ExperimentConfig
from text_al_pipeline.errors import InvalidArgument
from text_al_pipeline.experiments.active_learning import run_active_learning
from text_al_pipeline.experiments.bootstrap import build_bootstrap_splits, initialize_run
from text_al_pipeline.experiments.classification import run_classification
from text_al_pipeline.experiments.selection import run_uncertainty_selection

_ATTACK_WORDS = ["idiot", "stupid", "loser", "moron", "troll", "pathetic"]
_POLITE_WORDS = ["thanks", "source", "citation", "section", "talk", "welcome"]
_SHARED_WORDS = ["the", "page", "edit", "you", "this", "article"]


def _write_corpus(tmp_path, labeled: int = 60, unlabeled: int = 6):
    rows = []
    for index in range(labeled):
        label = index % 2
        words = _ATTACK_WORDS if label else _POLITE_WORDS
        text = " ".join(
            [
                words[index % len(words)],
                _SHARED_WORDS[index % len(_SHARED_WORDS)],
                words[(index + 3) % len(words)],
                _SHARED_WORDS[(index + 2) % len(_SHARED_WORDS)],
            ]
        )
        rows.append({"rev_id": f"r{index:03d}", "comment": text, "attack": label})
    for index in range(unlabeled):
        text = f"{_ATTACK_WORDS[index]} {_POLITE_WORDS[index]} page"
        rows.append({"rev_id": f"u{index:03d}", "comment": text, "attack": None})
    path = tmp_path / "comments.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def _config(tmp_path, **overrides) -> ExperimentConfig:
    raw = {
        "experiment_name": "attacks_test",
        "output_root": str(tmp_path / "runs"),
        "dataset": {
            "name": "synthetic_attacks",
            "path": str(_write_corpus(tmp_path)),
            "id_column": "rev_id",
            "text_column": "comment",
            "label_column": "attack",
        },
        "features": {"min_termfreq": 2, "min_docfreq": 2},
        "model": {"n_lambdas": 6, "n_folds": 3, "lambda_rule": "lambda_min"},
        "strategy_name": "uncertainty",
        "rounds": 3,
        "query_size": 4,
        "seeds": [1],
        "bootstrap": {"initial_labeled_size": 16, "test_size": 14},
    }
    raw.update(overrides)
    config = ExperimentConfig.from_dict(raw)
    config.validate()
    return config


def test_build_bootstrap_splits_is_seeded_and_disjoint():
    config = ExperimentConfig.from_dict(
        {
            "experiment_name": "x",
            "dataset": {"name": "x", "path": "x.csv"},
            "bootstrap": {"initial_labeled_size": 3, "test_size": 2, "pool_size": 8},
        }
    )
    ids = [f"r{index:03d}" for index in range(20)]
    first = build_bootstrap_splits(config.bootstrap, ids, seed=4)
    second = build_bootstrap_splits(config.bootstrap, ids, seed=4)
    assert first == second
    assert first.counts() == {"labeled": 3, "unlabeled": 3, "test": 2}


def test_build_bootstrap_splits_requires_unlabeled_room():
    config = ExperimentConfig.from_dict(
        {
            "experiment_name": "x",
            "dataset": {"name": "x", "path": "x.csv"},
            "bootstrap": {"initial_labeled_size": 3, "test_size": 2},
        }
    )
    with pytest.raises(ValueError, match="leave an unlabeled pool"):
        build_bootstrap_splits(config.bootstrap, ["a", "b", "c", "d", "e"], seed=0)


def test_initialize_run_writes_splits(tmp_path):
    result = initialize_run(_config(tmp_path))
    assert (result.labeled_count, result.unlabeled_count, result.test_count) == (16, 30, 14)
    payload = json.loads((result.run_dir / "splits.json").read_text(encoding="utf-8"))
    assert payload["dataset_hash"] == "synthetic_attacks:unknown"


def test_run_classification_reports_metrics_and_files(tmp_path):
    result = run_classification(_config(tmp_path))
    assert result.train_count == 46
    assert result.test_count == 14
    assert result.metrics["accuracy"] >= 0.8
    predictions = pd.read_csv(result.predictions_path)
    assert len(predictions) == 14
    assert set(predictions.columns) >= {"doc_id", "probability", "uncertainty", "label"}
    coefficients = pd.read_csv(result.coefficients_path)
    assert set(coefficients["feature"]) <= set(_ATTACK_WORDS + _POLITE_WORDS + _SHARED_WORDS)


def test_run_uncertainty_selection_ranks_unlabeled_rows(tmp_path):
    output = tmp_path / "worklist" / "to_label.csv"
    result = run_uncertainty_selection(_config(tmp_path), 3, output)
    assert result.labeled_count == 60
    assert result.unlabeled_count == 6
    frame = pd.read_csv(output)
    assert frame["rank"].tolist() == [0, 1, 2]
    assert frame["doc_id"].str.startswith("u").all()
    assert frame["uncertainty"].is_monotonic_increasing
    distance = (frame["probability"] - 0.5).abs()
    assert distance.tolist() == pytest.approx(frame["uncertainty"].tolist())


def test_run_uncertainty_selection_rejects_oversized_request(tmp_path):
    with pytest.raises(InvalidArgument, match="exceeds pool size"):
        run_uncertainty_selection(_config(tmp_path), 7, tmp_path / "out.csv")


def test_run_active_learning_grows_labeled_set(tmp_path):
    summary = run_active_learning(_config(tmp_path, seeds=[1, 2]))
    assert [result.seed for result in summary.results] == [1, 2]
    for result in summary.results:
        assert result.final_labeled_count == 16 + 3 * 4
        assert result.final_unlabeled_count == 30 - 3 * 4
        with (result.run_dir / "metrics.csv").open(encoding="utf-8") as handle:
            metrics = [row for row in csv.DictReader(handle) if row["metric"] == "test_f1"]
        assert [row["round_index"] for row in metrics] == ["0", "1", "2"]
        assert (result.run_dir / "round_2_selected.csv").exists()
