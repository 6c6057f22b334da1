from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from text_al_pipeline.contracts import LabeledDocument
from text_al_pipeline.data.loader import Corpus


class Oracle(Protocol):
    """Source of labels for the documents an AL round selects."""

    name: str

    def label(self, sample_ids: Sequence[str]) -> Mapping[str, int]:
        ...


class GoldLabelOracle:
    """Simulated annotator that reveals held-out gold labels."""

    name = "gold"

    def __init__(self, gold: Corpus) -> None:
        self._gold = gold

    def label(self, sample_ids: Sequence[str]) -> Mapping[str, int]:
        labels: dict[str, int] = {}
        for sample_id in sample_ids:
            document = self._gold[sample_id]
            if not isinstance(document, LabeledDocument):
                raise ValueError(f"No gold label available for {sample_id!r}.")
            labels[sample_id] = document.label
        return labels
