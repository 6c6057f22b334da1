from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from text_al_pipeline.artifacts import ArtifactStore
from text_al_pipeline.config import ExperimentConfig
from text_al_pipeline.data.loader import Corpus, load_corpus
from text_al_pipeline.data_pool import DataPoolManager
from text_al_pipeline.experiments.bootstrap import (
    build_bootstrap_splits,
    build_run_dir,
    dataset_hash,
)
from text_al_pipeline.models.text_lasso_runner import (
    TextLassoRunner,
    TextLassoRunnerConfig,
)
from text_al_pipeline.oracle import GoldLabelOracle
from text_al_pipeline.pipeline import ActiveLearningPipeline
from text_al_pipeline.profiling import StageProfiler
from text_al_pipeline.strategies import build_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedRunResult:
    seed: int
    run_dir: Path
    final_labeled_count: int
    final_unlabeled_count: int


@dataclass(frozen=True)
class ActiveLearningRunSummary:
    results: list[SeedRunResult]


def run_active_learning(
    config: ExperimentConfig,
    config_source: Path | None = None,
    corpus: Corpus | None = None,
) -> ActiveLearningRunSummary:
    """Simulate AL rounds per seed, revealing gold labels for selected rows."""
    gold = corpus if corpus is not None else load_corpus(config.dataset)

    results: list[SeedRunResult] = []
    for seed in config.seeds:
        run_dir = build_run_dir(
            config.output_root, config.experiment_name, seed, label=config.strategy_name
        )
        artifacts = ArtifactStore(run_dir)
        artifacts.initialize(config, config_source=config_source)

        splits = build_bootstrap_splits(config.bootstrap, gold.labeled_ids, seed=seed)
        artifacts.write_splits(splits, dataset_hash=dataset_hash(config))

        working = gold.without_labels(splits.unlabeled)
        pool = DataPoolManager.from_splits(splits)
        model_runner = TextLassoRunner(
            corpus=working,
            config=TextLassoRunnerConfig(
                features=config.features,
                lasso=config.model,
                parallel=config.parallel,
                threshold=config.threshold,
            ),
            test_ids=splits.test,
        )
        pipeline = ActiveLearningPipeline(
            corpus=working,
            pool=pool,
            model_runner=model_runner,
            strategy=build_strategy(config.strategy_name, config.strategy_params),
            oracle=GoldLabelOracle(gold),
            artifacts=artifacts,
            profiler=StageProfiler(n_jobs=config.parallel.n_jobs),
            query_size=config.query_size,
        )
        logger.info(
            "Seed %d: L=%d U=%d T=%d, strategy=%s",
            seed,
            len(splits.labeled),
            len(splits.unlabeled),
            len(splits.test),
            config.strategy_name,
        )
        pipeline.run_seed(seed=seed, rounds=config.rounds)

        final_splits = pool.to_splits()
        artifacts.write_splits(final_splits, dataset_hash=dataset_hash(config))
        final_counts = final_splits.counts()
        results.append(
            SeedRunResult(
                seed=seed,
                run_dir=run_dir,
                final_labeled_count=final_counts["labeled"],
                final_unlabeled_count=final_counts["unlabeled"],
            )
        )
    return ActiveLearningRunSummary(results=results)
