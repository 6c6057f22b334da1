from __future__ import annotations

import logging
from typing import Sequence

from text_al_pipeline.artifacts import ArtifactStore
from text_al_pipeline.contracts import MetricRecord, SelectionRecord
from text_al_pipeline.data.loader import Corpus
from text_al_pipeline.data_pool import DataPoolManager
from text_al_pipeline.models import ModelRunner
from text_al_pipeline.oracle import Oracle
from text_al_pipeline.profiling import StageProfiler
from text_al_pipeline.strategies.base import QueryStrategy

logger = logging.getLogger(__name__)


class ActiveLearningPipeline:
    """Train, score, select, label, acquire; once per round."""

    def __init__(
        self,
        corpus: Corpus,
        pool: DataPoolManager,
        model_runner: ModelRunner,
        strategy: QueryStrategy,
        oracle: Oracle,
        artifacts: ArtifactStore,
        profiler: StageProfiler,
        query_size: int,
    ) -> None:
        self.corpus = corpus
        self.pool = pool
        self.model_runner = model_runner
        self.strategy = strategy
        self.oracle = oracle
        self.artifacts = artifacts
        self.profiler = profiler
        self.query_size = query_size

    def run_round(self, round_index: int, seed: int) -> list[str]:
        unlabeled_ids = self.pool.unlabeled_ids()
        if not unlabeled_ids:
            return []

        with self.profiler.measure(round_index, "score_unlabeled"):
            candidates = self.model_runner.score_unlabeled(unlabeled_ids)

        with self.profiler.measure(round_index, "select_candidates"):
            k = min(self.query_size, len(candidates))
            selected = self.strategy.select(candidates, k, seed=seed)

        selected_ids = [candidate.sample_id for candidate in selected]
        with self.profiler.measure(round_index, "oracle_label", notes=self.oracle.name):
            labels = dict(self.oracle.label(selected_ids))
        self.corpus.record_labels(labels)
        acquired_ids = self.pool.acquire(selected_ids)

        records = [
            SelectionRecord(
                round_index=round_index,
                seed=seed,
                strategy=self.strategy.name,
                sample_id=item.sample_id,
                score=item.score,
                probability=item.probability,
                label=labels.get(item.sample_id),
                metadata=item.metadata,
            )
            for item in selected
        ]
        self.artifacts.write_round_selection(round_index, records)
        self.artifacts.append_profile(self.profiler.flush())
        return acquired_ids

    def persist_metrics(
        self, round_index: int, seed: int, split: str, metrics: dict[str, float]
    ) -> None:
        self.artifacts.append_metrics(
            [
                MetricRecord(
                    round_index=round_index,
                    seed=seed,
                    split=split,
                    metric=name,
                    value=value,
                )
                for name, value in metrics.items()
            ]
        )

    def run_seed(self, seed: int, rounds: int) -> Sequence[str]:
        for round_index in range(rounds):
            logger.info("AL round %d/%d (seed %d)", round_index, rounds - 1, seed)
            with self.profiler.measure(round_index, "train_round"):
                train_metrics = self.model_runner.train_round(
                    round_index=round_index,
                    seed=seed,
                    labeled_ids=self.pool.labeled_ids(),
                )
            self.persist_metrics(round_index, seed, "train", dict(train_metrics))
            self.artifacts.append_profile(self.profiler.flush())
            acquired = self.run_round(round_index=round_index, seed=seed)
            if not acquired:
                logger.info("Unlabeled pool exhausted after round %d.", round_index)
                break
        return self.pool.labeled_ids()
