from __future__ import annotations

import random
from dataclasses import replace
from typing import Sequence

from text_al_pipeline.contracts import SelectionCandidate
from text_al_pipeline.strategies.base import check_selection_count


class RandomStrategy:
    """Passive-learning baseline: a seeded shuffle of the unlabeled pool."""

    name = "random"

    def select(
        self, candidates: Sequence[SelectionCandidate], k: int, seed: int | None = None
    ) -> list[SelectionCandidate]:
        count = check_selection_count(k, len(candidates))
        if count == 0:
            return []

        pool = list(candidates)
        random.Random(seed).shuffle(pool)
        return [
            replace(candidate, metadata={**candidate.metadata, "random_rank": rank})
            for rank, candidate in enumerate(pool[:count])
        ]
