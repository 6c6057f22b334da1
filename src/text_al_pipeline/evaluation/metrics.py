from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from sklearn.metrics import confusion_matrix as _sklearn_confusion_matrix


@dataclass(frozen=True)
class ConfusionMatrix:
    tp: int
    fp: int
    fn: int
    tn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.fn + self.tn

    @property
    def accuracy(self) -> float:
        return _ratio(self.tp + self.tn, self.total)

    @property
    def precision(self) -> float:
        return _ratio(self.tp, self.tp + self.fp)

    @property
    def recall(self) -> float:
        return _ratio(self.tp, self.tp + self.fn)

    @property
    def specificity(self) -> float:
        return _ratio(self.tn, self.tn + self.fp)

    @property
    def f1(self) -> float:
        precision = self.precision
        recall = self.recall
        if math.isnan(precision) or math.isnan(recall) or precision + recall == 0:
            return math.nan
        return 2.0 * precision * recall / (precision + recall)

    @property
    def balanced_accuracy(self) -> float:
        recall = self.recall
        specificity = self.specificity
        if math.isnan(recall) or math.isnan(specificity):
            return math.nan
        return (recall + specificity) / 2.0

    def to_dict(self) -> dict[str, float]:
        return {
            "tp": float(self.tp),
            "fp": float(self.fp),
            "fn": float(self.fn),
            "tn": float(self.tn),
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "specificity": self.specificity,
            "f1": self.f1,
            "balanced_accuracy": self.balanced_accuracy,
        }


def confusion_matrix(
    y_true: Sequence[int], y_pred: Sequence[int]
) -> ConfusionMatrix:
    if len(y_true) != len(y_pred):
        raise ValueError(
            f"y_true has {len(y_true)} items but y_pred has {len(y_pred)}."
        )
    matrix = _sklearn_confusion_matrix(
        np.asarray(y_true, dtype=int), np.asarray(y_pred, dtype=int), labels=[0, 1]
    )
    tn, fp, fn, tp = (int(value) for value in matrix.ravel())
    return ConfusionMatrix(tp=tp, fp=fp, fn=fn, tn=tn)


def classification_metrics(
    y_true: Sequence[int],
    probabilities: Sequence[float],
    threshold: float = 0.5,
) -> dict[str, float]:
    if threshold < 0.0 or threshold > 1.0:
        raise ValueError("threshold must be in [0, 1].")
    predictions = (np.asarray(probabilities, dtype=float) > threshold).astype(int)
    return confusion_matrix(y_true, predictions.tolist()).to_dict()


def _ratio(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return math.nan
    return float(numerator) / float(denominator)
