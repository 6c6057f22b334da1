from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from text_al_pipeline.contracts import SelectionCandidate


class ModelRunner(Protocol):
    """What the active-learning loop needs from a classifier.

    ``train_round`` refits from scratch on the current labeled ids and returns
    flat numeric metrics; ``n_labeled`` is expected among them because budget
    comparisons read it back from ``metrics.csv``. ``score_unlabeled`` returns
    one candidate per id, in the order given, carrying the positive-class
    probability of the model fitted by the latest ``train_round``.
    """

    name: str

    def train_round(
        self, round_index: int, seed: int, labeled_ids: Sequence[str]
    ) -> Mapping[str, float]:
        ...

    def score_unlabeled(self, unlabeled_ids: Sequence[str]) -> list[SelectionCandidate]:
        ...
