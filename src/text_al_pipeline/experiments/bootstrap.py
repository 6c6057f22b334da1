from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from text_al_pipeline.artifacts import ArtifactStore
from text_al_pipeline.config import BootstrapConfig, ExperimentConfig
from text_al_pipeline.contracts import DatasetSplits
from text_al_pipeline.data.loader import load_corpus


@dataclass(frozen=True)
class BootstrapResult:
    run_dir: Path
    labeled_count: int
    unlabeled_count: int
    test_count: int


def initialize_run(
    config: ExperimentConfig, config_source: Path | None = None
) -> BootstrapResult:
    corpus = load_corpus(config.dataset)
    run_dir = build_run_dir(config.output_root, config.experiment_name, config.seeds[0])

    artifacts = ArtifactStore(run_dir)
    artifacts.initialize(config, config_source=config_source)

    splits = build_bootstrap_splits(
        config.bootstrap, corpus.labeled_ids, seed=config.seeds[0]
    )
    artifacts.write_splits(splits, dataset_hash=dataset_hash(config))

    counts = splits.counts()
    return BootstrapResult(
        run_dir=run_dir,
        labeled_count=counts["labeled"],
        unlabeled_count=counts["unlabeled"],
        test_count=counts["test"],
    )


def build_run_dir(
    output_root: str, experiment_name: str, seed: int, label: str | None = None
) -> Path:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    parts = [timestamp] + ([label] if label else []) + [f"seed{seed}"]
    return Path(output_root) / experiment_name / "_".join(parts)


def dataset_hash(config: ExperimentConfig) -> str:
    return f"{config.dataset.name}:{config.dataset.version}"


def build_bootstrap_splits(
    bootstrap: BootstrapConfig, labeled_ids: Sequence[str], seed: int
) -> DatasetSplits:
    """Shuffle the gold-labeled IDs and cut them into L, T and a simulated U."""
    ids = list(labeled_ids)
    rng = random.Random(seed)
    rng.shuffle(ids)
    if bootstrap.pool_size is not None and len(ids) > bootstrap.pool_size:
        ids = ids[: bootstrap.pool_size]

    labeled_end = bootstrap.initial_labeled_size
    test_end = labeled_end + bootstrap.test_size
    if test_end >= len(ids):
        raise ValueError(
            f"Dataset has {len(ids)} labeled rows, but bootstrap config needs more "
            f"than {test_end} (initial + test) to leave an unlabeled pool."
        )

    splits = DatasetSplits(
        labeled=ids[:labeled_end],
        test=ids[labeled_end:test_end],
        unlabeled=ids[test_end:],
    )
    splits.validate()
    return splits
