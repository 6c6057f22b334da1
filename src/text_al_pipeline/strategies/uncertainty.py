"""Uncertainty sampling for binary probabilistic classifiers.

A pool item's uncertainty score is its distance from the decision boundary,
``|p - 0.5|``. Lower scores are more uncertain and are ranked first. The raw
classifier output is used as-is: no calibration, no clamping.
"""

from __future__ import annotations

import math
import random
from dataclasses import replace
from typing import Any, Literal, Protocol, Sequence

from scipy import sparse

from text_al_pipeline.contracts import SelectionCandidate
from text_al_pipeline.errors import FeatureSpaceMismatch, InvalidProbability
from text_al_pipeline.strategies.base import check_selection_count

TieBreak = Literal["stable", "random"]

DECISION_BOUNDARY = 0.5
_VALID_TIE_BREAKS = frozenset({"stable", "random"})


class ProbabilisticClassifier(Protocol):
    def predict_probability(self, feature_vector: Any) -> float:
        ...


def uncertainty_score(probability: float, index: int | None = None) -> float:
    value = float(probability)
    if math.isnan(value) or value < 0.0 or value > 1.0:
        raise InvalidProbability(probability, index=index)
    return abs(value - DECISION_BOUNDARY)


def uncertainty_scores(probabilities: Sequence[float]) -> list[float]:
    return [
        uncertainty_score(probability, index=index)
        for index, probability in enumerate(probabilities)
    ]


def rank_uncertain(
    probabilities: Sequence[float],
    n: int,
    tie_break: TieBreak = "stable",
    seed: int | None = None,
) -> list[tuple[int, float]]:
    """Return the ``n`` most uncertain ``(index, score)`` pairs, most uncertain first.

    Equal scores keep their original pool order unless ``tie_break`` is
    ``"random"``, in which case they are shuffled with a ``seed``-ed RNG.
    """
    n = check_selection_count(n, len(probabilities))
    if tie_break not in _VALID_TIE_BREAKS:
        raise ValueError(f"tie_break must be one of {sorted(_VALID_TIE_BREAKS)}.")
    if n == 0:
        return []

    scores = uncertainty_scores(probabilities)
    if tie_break == "random":
        rng = random.Random(seed)
        jitter = [rng.random() for _ in scores]
        order = sorted(range(len(scores)), key=lambda index: (scores[index], jitter[index]))
    else:
        order = sorted(range(len(scores)), key=lambda index: scores[index])
    return [(index, scores[index]) for index in order[:n]]


def rank_pool(
    classifier: ProbabilisticClassifier,
    pool: Any,
    n: int,
    tie_break: TieBreak = "stable",
    seed: int | None = None,
) -> list[tuple[int, float]]:
    """Score every feature vector in ``pool`` with ``classifier`` and rank them.

    ``pool`` is a sequence of vectors or a 2-D (dense or scipy sparse) matrix
    whose rows are vectors. Every vector must match the classifier's
    ``n_features`` when it exposes one, otherwise the first vector's width.
    """
    size = _pool_size(pool)
    n = check_selection_count(n, size)
    if n == 0:
        return []

    expected = getattr(classifier, "n_features", None)
    vectors = [_pool_row(pool, index) for index in range(size)]
    for index, vector in enumerate(vectors):
        width = _vector_width(vector)
        if expected is None:
            expected = width
        if width != expected:
            raise FeatureSpaceMismatch(expected=expected, actual=width, index=index)

    probabilities = [classifier.predict_probability(vector) for vector in vectors]
    return rank_uncertain(probabilities, n, tie_break=tie_break, seed=seed)


def select_uncertain(
    classifier: ProbabilisticClassifier,
    pool: Any,
    n: int,
    tie_break: TieBreak = "stable",
    seed: int | None = None,
) -> list[int]:
    return [
        index
        for index, _score in rank_pool(
            classifier, pool, n, tie_break=tie_break, seed=seed
        )
    ]


class UncertaintyStrategy:
    name = "uncertainty"

    def __init__(self, tie_break: TieBreak = "stable") -> None:
        normalized = str(tie_break).strip().lower()
        if normalized not in _VALID_TIE_BREAKS:
            raise ValueError(f"tie_break must be one of {sorted(_VALID_TIE_BREAKS)}.")
        self._tie_break = normalized

    def select(
        self, candidates: Sequence[SelectionCandidate], k: int, seed: int | None = None
    ) -> list[SelectionCandidate]:
        ranked = rank_uncertain(
            [candidate.probability for candidate in candidates],
            k,
            tie_break=self._tie_break,
            seed=seed,
        )
        selected: list[SelectionCandidate] = []
        for rank, (index, score) in enumerate(ranked):
            candidate = candidates[index]
            metadata = dict(candidate.metadata)
            metadata["uncertainty_rank"] = rank
            selected.append(replace(candidate, score=score, metadata=metadata))
        return selected


def _pool_size(pool: Any) -> int:
    shape = getattr(pool, "shape", None)
    if shape is not None and len(shape) == 2:
        return int(shape[0])
    return len(pool)


def _pool_row(pool: Any, index: int) -> Any:
    if sparse.issparse(pool):
        return pool[index : index + 1]
    return pool[index]


def _vector_width(vector: Any) -> int:
    shape = getattr(vector, "shape", None)
    if shape is not None and len(shape) > 0:
        return int(shape[-1])
    return len(vector)
