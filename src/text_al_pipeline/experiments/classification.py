from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path

from text_al_pipeline.artifacts import ArtifactStore
from text_al_pipeline.config import ExperimentConfig
from text_al_pipeline.contracts import MetricRecord
from text_al_pipeline.data.loader import load_corpus
from text_al_pipeline.evaluation.metrics import classification_metrics
from text_al_pipeline.experiments.bootstrap import build_run_dir
from text_al_pipeline.features import DocumentFeatureMatrix
from text_al_pipeline.inspection import coefficient_frame, prediction_frame
from text_al_pipeline.models.lasso import LassoLogisticClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    run_dir: Path
    train_count: int
    test_count: int
    n_features: int
    selected_lambda: float
    metrics: dict[str, float]
    predictions_path: Path
    coefficients_path: Path


def run_classification(
    config: ExperimentConfig, config_source: Path | None = None
) -> ClassificationResult:
    """Fit on a train split of the labeled rows and evaluate on the rest."""
    seed = config.seeds[0]
    corpus = load_corpus(config.dataset)
    labeled_ids = list(corpus.labeled_ids)
    random.Random(seed).shuffle(labeled_ids)
    test_size = config.bootstrap.test_size
    if test_size <= 0 or test_size >= len(labeled_ids):
        raise ValueError(
            f"bootstrap.test_size must be in (0, {len(labeled_ids)}) for classification."
        )
    test_ids = labeled_ids[:test_size]
    train_ids = labeled_ids[test_size:]

    run_dir = build_run_dir(config.output_root, config.experiment_name, seed)
    artifacts = ArtifactStore(run_dir)
    artifacts.initialize(config, config_source=config_source)

    features, train_matrix = DocumentFeatureMatrix.fit(
        corpus.texts(train_ids), config.features
    )
    logger.info(
        "Document-feature matrix: %d documents x %d features.",
        train_matrix.shape[0],
        train_matrix.shape[1],
    )
    classifier = LassoLogisticClassifier(config.model, seed=seed).fit(
        train_matrix, corpus.labels(train_ids), config.parallel
    )

    test_texts = corpus.texts(test_ids)
    test_labels = corpus.labels(test_ids)
    probabilities = classifier.predict_proba(features.transform(test_texts))
    metrics = classification_metrics(test_labels, probabilities, config.threshold)
    artifacts.append_metrics(
        MetricRecord(round_index=0, seed=seed, split="test", metric=name, value=value)
        for name, value in metrics.items()
    )

    predictions = prediction_frame(
        test_ids, test_texts, probabilities, test_labels, threshold=config.threshold
    )
    predictions_path = artifacts.write_frame("predictions.csv", predictions)
    coefficients_path = artifacts.write_frame(
        "coefficients.csv", coefficient_frame(classifier, features.vocabulary)
    )

    cv = classifier.cv_results
    return ClassificationResult(
        run_dir=run_dir,
        train_count=len(train_ids),
        test_count=len(test_ids),
        n_features=features.n_features,
        selected_lambda=cv.selected_lambda if cv is not None else float("nan"),
        metrics=metrics,
        predictions_path=predictions_path,
        coefficients_path=coefficients_path,
    )
