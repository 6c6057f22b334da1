from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from text_al_pipeline.config import ExperimentConfig
from text_al_pipeline.data.loader import load_corpus
from text_al_pipeline.features import DocumentFeatureMatrix
from text_al_pipeline.models.lasso import LassoLogisticClassifier
from text_al_pipeline.strategies.uncertainty import rank_pool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionResult:
    output_path: Path
    labeled_count: int
    unlabeled_count: int
    selected: pd.DataFrame


def run_uncertainty_selection(
    config: ExperimentConfig, n: int, output_path: str | Path
) -> SelectionResult:
    """Fit on every labeled row and write the ``n`` most uncertain unlabeled rows.

    The output CSV is the worklist for the next round of human labeling, most
    uncertain first.
    """
    seed = config.seeds[0]
    corpus = load_corpus(config.dataset)
    labeled_ids = corpus.labeled_ids
    unlabeled_ids = corpus.unlabeled_ids

    features, train_matrix = DocumentFeatureMatrix.fit(
        corpus.texts(labeled_ids), config.features
    )
    classifier = LassoLogisticClassifier(config.model, seed=seed).fit(
        train_matrix, corpus.labels(labeled_ids), config.parallel
    )
    pool = features.transform(corpus.texts(unlabeled_ids))
    ranked = rank_pool(
        classifier,
        pool,
        n,
        tie_break=str(config.strategy_params.get("tie_break", "stable")),
        seed=seed,
    )

    rows = []
    for rank, (index, score) in enumerate(ranked):
        doc_id = unlabeled_ids[index]
        rows.append(
            {
                "rank": rank,
                "pool_index": index,
                "doc_id": doc_id,
                "text": corpus[doc_id].text,
                "probability": classifier.predict_probability(pool[index : index + 1]),
                "uncertainty": score,
            }
        )
    selected = pd.DataFrame(
        rows,
        columns=["rank", "pool_index", "doc_id", "text", "probability", "uncertainty"],
    )

    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    selected.to_csv(target, index=False, encoding="utf-8")
    logger.info("Wrote %d uncertain documents to %s.", len(selected), target)
    return SelectionResult(
        output_path=target,
        labeled_count=len(labeled_ids),
        unlabeled_count=len(unlabeled_ids),
        selected=selected,
    )
