from __future__ import annotations

import json

import pandas as pd
import pytest

from text_al_pipeline.cli import main, parse_args
from text_al_pipeline.data import CorpusConfig, load_corpus
from text_al_pipeline.oracle import GoldLabelOracle


def _write_inputs(tmp_path):
    rows = []
    for index in range(24):
        label = index % 2
        word = ["thanks", "idiot"][label]
        other = ["source", "loser"][label]
        text = f"{word} page {other}"
        rows.append({"rev_id": f"r{index:02d}", "comment": text, "attack": label})
    rows.append({"rev_id": "u00", "comment": "idiot thanks page", "attack": None})
    rows.append({"rev_id": "u01", "comment": "thanks source page", "attack": None})
    corpus_path = tmp_path / "comments.csv"
    pd.DataFrame(rows).to_csv(corpus_path, index=False)

    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "experiment_name": "cli_test",
                "output_root": str(tmp_path / "runs"),
                "dataset": {
                    "name": "toy",
                    "path": str(corpus_path),
                    "id_column": "rev_id",
                    "text_column": "comment",
                    "label_column": "attack",
                },
                "model": {"n_lambdas": 4, "n_folds": 3},
                "query_size": 1,
                "seeds": [3],
                "bootstrap": {"initial_labeled_size": 8, "test_size": 6},
            }
        ),
        encoding="utf-8",
    )
    return corpus_path, config_path


def test_parse_args_defaults():
    args = parse_args([])
    assert args.mode == "classify"
    assert args.select_count is None
    assert args.budget_ratio == 0.5


def test_main_select_writes_worklist(tmp_path, capsys):
    _, config_path = _write_inputs(tmp_path)
    output = tmp_path / "to_label.csv"

    exit_code = main(
        [
            "--mode",
            "select",
            "--config",
            str(config_path),
            "--select-count",
            "2",
            "--output",
            str(output),
        ]
    )

    assert exit_code == 0
    worklist = pd.read_csv(output)
    assert sorted(worklist["doc_id"]) == ["u00", "u01"]
    assert "Selected 2 of 2 unlabeled" in capsys.readouterr().out


def test_main_bootstrap_prints_split_sizes(tmp_path, capsys):
    _, config_path = _write_inputs(tmp_path)

    assert main(["--mode", "bootstrap", "--config", str(config_path)]) == 0
    assert "L=8, U=10, T=6" in capsys.readouterr().out


def test_gold_label_oracle_reveals_labels(tmp_path):
    corpus_path, _ = _write_inputs(tmp_path)
    gold = load_corpus(
        CorpusConfig(
            name="toy",
            path=str(corpus_path),
            id_column="rev_id",
            text_column="comment",
            label_column="attack",
        )
    )
    oracle = GoldLabelOracle(gold)
    assert oracle.label(["r00", "r01"]) == {"r00": 0, "r01": 1}
    with pytest.raises(ValueError, match="u00"):
        oracle.label(["u00"])
