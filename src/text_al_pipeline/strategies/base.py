from __future__ import annotations

import operator
from typing import Protocol, Sequence

from text_al_pipeline.contracts import SelectionCandidate
from text_al_pipeline.errors import InvalidArgument


class QueryStrategy(Protocol):
    """Picks the ``k`` candidates an annotator should label next.

    ``k == 0`` selects nothing; a negative ``k`` or one larger than the
    candidate pool raises ``InvalidArgument``.
    """

    name: str

    def select(
        self, candidates: Sequence[SelectionCandidate], k: int, seed: int | None = None
    ) -> list[SelectionCandidate]:
        ...


def check_selection_count(n: object, pool_size: int) -> int:
    try:
        count = operator.index(n)
    except TypeError:
        raise InvalidArgument(
            f"Selection count must be an integer; got {n!r}."
        ) from None
    if count < 0:
        raise InvalidArgument(f"Selection count must be >= 0; got {count}.")
    if count > 0 and pool_size == 0:
        raise InvalidArgument(f"Cannot select {count} item(s) from an empty pool.")
    if count > pool_size:
        raise InvalidArgument(
            f"Selection count {count} exceeds pool size {pool_size}."
        )
    return count
