"""Files of one run directory.

``config_snapshot.json``
    The experiment config, its source path and the creation time.
``splits.json``
    L/U/T document ids; rewritten after the last round of a simulated run.
``metrics.csv``
    One row per round, seed, split and metric name.
``profile.csv``
    One row per timed stage.
``round_<i>_selected.csv``
    The documents picked in round ``i`` with their probability and label.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Sequence

import pandas as pd

from text_al_pipeline.config import ExperimentConfig
from text_al_pipeline.contracts import (
    DatasetSplits,
    MetricRecord,
    ProfileRecord,
    SelectionRecord,
)

METRIC_COLUMNS = ["round_index", "seed", "split", "metric", "value"]
PROFILE_COLUMNS = ["round_index", "stage", "latency_ms", "n_jobs", "notes"]
SELECTION_COLUMNS = [
    "round_index",
    "seed",
    "strategy",
    "sample_id",
    "score",
    "probability",
    "label",
    "metadata",
]


class ArtifactStore:
    def __init__(self, run_dir: Path) -> None:
        self.run_dir = Path(run_dir)

    @property
    def metrics_path(self) -> Path:
        return self.run_dir / "metrics.csv"

    @property
    def profile_path(self) -> Path:
        return self.run_dir / "profile.csv"

    def initialize(
        self, config: ExperimentConfig, config_source: Path | None = None
    ) -> None:
        self.run_dir.mkdir(parents=True, exist_ok=True)
        for path, columns in (
            (self.metrics_path, METRIC_COLUMNS),
            (self.profile_path, PROFILE_COLUMNS),
        ):
            if not path.exists():
                pd.DataFrame(columns=columns).to_csv(path, index=False)

        snapshot: dict[str, Any] = {**config.to_dict(), "created_at_utc": _utc_now()}
        if config_source is not None:
            snapshot["config_source"] = str(config_source)
        self._write_json("config_snapshot.json", snapshot)

    def write_splits(self, splits: DatasetSplits, dataset_hash: str) -> Path:
        splits.validate()
        return self._write_json(
            "splits.json",
            {
                "created_at_utc": _utc_now(),
                "dataset_hash": dataset_hash,
                "counts": splits.counts(),
                "splits": {"L": splits.labeled, "U": splits.unlabeled, "T": splits.test},
            },
        )

    def write_round_selection(
        self, round_index: int, records: Sequence[SelectionRecord]
    ) -> Path:
        frame = pd.DataFrame(
            [asdict(record) for record in records], columns=SELECTION_COLUMNS
        )
        frame["label"] = frame["label"].astype("Int64")
        frame["metadata"] = [
            json.dumps(record.metadata, sort_keys=True) for record in records
        ]
        return self.write_frame(f"round_{round_index}_selected.csv", frame)

    def write_frame(self, name: str, frame: pd.DataFrame) -> Path:
        path = self.run_dir / name
        frame.to_csv(path, index=False, encoding="utf-8")
        return path

    def append_metrics(self, records: Iterable[MetricRecord]) -> None:
        rows = [asdict(record) for record in records]
        self._append(self.metrics_path, rows, METRIC_COLUMNS)

    def append_profile(self, records: Iterable[ProfileRecord]) -> None:
        rows = [asdict(record) for record in records]
        for row in rows:
            row["latency_ms"] = round(row["latency_ms"], 3)
        self._append(self.profile_path, rows, PROFILE_COLUMNS)

    def read_metrics(self) -> pd.DataFrame:
        return pd.read_csv(self.metrics_path)

    def _write_json(self, name: str, payload: dict[str, Any]) -> Path:
        path = self.run_dir / name
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    @staticmethod
    def _append(path: Path, rows: list[dict[str, Any]], columns: list[str]) -> None:
        if not rows:
            return
        pd.DataFrame(rows, columns=columns).to_csv(
            path, mode="a", header=not path.exists(), index=False, encoding="utf-8"
        )


def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()
