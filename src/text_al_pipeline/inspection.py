"""DataFrames for reading a classifier's predictions by hand."""

from __future__ import annotations

from typing import Literal, Sequence

import numpy as np
import pandas as pd

from text_al_pipeline.models.lasso import LassoLogisticClassifier
from text_al_pipeline.strategies.uncertainty import uncertainty_scores

ErrorKind = Literal["false_positive", "false_negative"]


def prediction_frame(
    doc_ids: Sequence[str],
    texts: Sequence[str],
    probabilities: Sequence[float],
    labels: Sequence[int | None] | None = None,
    threshold: float = 0.5,
) -> pd.DataFrame:
    if not (len(doc_ids) == len(texts) == len(probabilities)):
        raise ValueError("doc_ids, texts and probabilities must have equal length.")
    if labels is not None and len(labels) != len(doc_ids):
        raise ValueError("labels must match doc_ids in length.")

    probability = np.asarray(probabilities, dtype=float)
    frame = pd.DataFrame(
        {
            "doc_id": list(doc_ids),
            "text": list(texts),
            "probability": probability,
            "predicted": (probability > threshold).astype(int),
            "uncertainty": uncertainty_scores(probability.tolist()),
        }
    )
    frame["label"] = pd.array(
        list(labels) if labels is not None else [None] * len(frame), dtype="Int64"
    )
    return frame


def misclassified(
    frame: pd.DataFrame, kind: ErrorKind = "false_positive", n: int | None = None
) -> pd.DataFrame:
    """Errors of one kind, most confident mistakes first."""
    labeled = frame[frame["label"].notna()]
    if kind == "false_positive":
        errors = labeled[(labeled["predicted"] == 1) & (labeled["label"] == 0)]
        errors = errors.sort_values("probability", ascending=False, kind="stable")
    elif kind == "false_negative":
        errors = labeled[(labeled["predicted"] == 0) & (labeled["label"] == 1)]
        errors = errors.sort_values("probability", ascending=True, kind="stable")
    else:
        raise ValueError("kind must be 'false_positive' or 'false_negative'.")
    return errors if n is None else errors.head(n)


def most_uncertain(frame: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    return frame.sort_values("uncertainty", ascending=True, kind="stable").head(n)


def coefficient_frame(
    classifier: LassoLogisticClassifier,
    feature_names: Sequence[str],
    n: int | None = None,
) -> pd.DataFrame:
    """Non-zero lasso coefficients; with ``n``, the top ``n`` of each sign."""
    frame = pd.DataFrame(
        classifier.nonzero_coefficients(feature_names),
        columns=["feature", "coefficient"],
    )
    if n is None:
        return frame.reset_index(drop=True)
    positive = frame[frame["coefficient"] > 0].head(n)
    negative = frame[frame["coefficient"] < 0].sort_values("coefficient").head(n)
    return pd.concat([positive, negative], ignore_index=True)
