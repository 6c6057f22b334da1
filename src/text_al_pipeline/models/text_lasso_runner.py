from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from text_al_pipeline.contracts import SelectionCandidate
from text_al_pipeline.data.loader import Corpus
from text_al_pipeline.evaluation.metrics import classification_metrics
from text_al_pipeline.features import DocumentFeatureMatrix, FeatureConfig
from text_al_pipeline.models.lasso import (
    LassoConfig,
    LassoLogisticClassifier,
    ParallelConfig,
)
from text_al_pipeline.strategies.uncertainty import uncertainty_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextLassoRunnerConfig:
    features: FeatureConfig = field(default_factory=FeatureConfig)
    lasso: LassoConfig = field(default_factory=LassoConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    threshold: float = 0.5


class TextLassoRunner:
    """Refits the bag-of-words lasso pipeline on every round's labeled set.

    The vocabulary is rebuilt from the labeled texts each round, and both the
    test split and the unlabeled pool are projected onto it.
    """

    name = "bow_lasso"

    def __init__(
        self,
        corpus: Corpus,
        config: TextLassoRunnerConfig | None = None,
        test_ids: Sequence[str] | None = None,
    ) -> None:
        self._corpus = corpus
        self._config = config or TextLassoRunnerConfig()
        self._test_ids = list(test_ids or [])
        self.features: DocumentFeatureMatrix | None = None
        self.classifier: LassoLogisticClassifier | None = None

    def train_round(
        self, round_index: int, seed: int, labeled_ids: Sequence[str]
    ) -> Mapping[str, float]:
        if not labeled_ids:
            return {"n_labeled": 0.0, "test_f1": math.nan, "test_accuracy": math.nan}

        features, train_matrix = DocumentFeatureMatrix.fit(
            self._corpus.texts(labeled_ids), self._config.features
        )
        classifier = LassoLogisticClassifier(self._config.lasso, seed=seed + round_index)
        classifier.fit(
            train_matrix, self._corpus.labels(labeled_ids), self._config.parallel
        )
        self.features = features
        self.classifier = classifier

        cv = classifier.cv_results
        metrics: dict[str, float] = {
            "n_labeled": float(len(labeled_ids)),
            "n_features": float(features.n_features),
            "n_nonzero": float(
                len(classifier.nonzero_coefficients(features.vocabulary))
            ),
            "lambda": cv.selected_lambda if cv is not None else math.nan,
        }
        if self._test_ids:
            probabilities = classifier.predict_proba(
                features.transform(self._corpus.texts(self._test_ids))
            )
            test_metrics = classification_metrics(
                self._corpus.labels(self._test_ids),
                probabilities,
                threshold=self._config.threshold,
            )
            metrics.update({f"test_{name}": value for name, value in test_metrics.items()})
        logger.debug("Round %d metrics: %s", round_index, metrics)
        return metrics

    def score_unlabeled(self, unlabeled_ids: Sequence[str]) -> list[SelectionCandidate]:
        if not unlabeled_ids:
            return []
        if self.features is None or self.classifier is None:
            raise RuntimeError("train_round must run before score_unlabeled.")

        probabilities = self.classifier.predict_proba(
            self.features.transform(self._corpus.texts(unlabeled_ids))
        )
        return [
            SelectionCandidate(
                sample_id=str(sample_id),
                score=uncertainty_score(probability, index=index),
                probability=float(probability),
                metadata={"uncertainty": "distance_to_boundary"},
            )
            for index, (sample_id, probability) in enumerate(
                zip(unlabeled_ids, probabilities)
            )
        ]
