from __future__ import annotations

from typing import Iterable, Mapping

from text_al_pipeline.contracts import DatasetSplits

LABELED = "L"
UNLABELED = "U"
TEST = "T"


class DataPoolManager:
    """Which split every document id currently belongs to.

    Acquisition only moves ids from U to L. Test ids and ids the pool has never
    seen are ignored, so an oracle answer can never leak into the test split.
    """

    def __init__(self, assignment: Mapping[str, str]) -> None:
        unknown = set(assignment.values()) - {LABELED, UNLABELED, TEST}
        if unknown:
            raise ValueError(f"Unknown split tag(s): {sorted(unknown)}.")
        self._assignment = dict(assignment)

    @classmethod
    def from_splits(cls, splits: DatasetSplits) -> "DataPoolManager":
        splits.validate()
        assignment = {doc_id: LABELED for doc_id in splits.labeled}
        assignment.update({doc_id: UNLABELED for doc_id in splits.unlabeled})
        assignment.update({doc_id: TEST for doc_id in splits.test})
        return cls(assignment)

    def acquire(self, sample_ids: Iterable[str]) -> list[str]:
        """Label the given ids; returns those that actually left the pool, in order."""
        acquired = [
            doc_id
            for doc_id in dict.fromkeys(sample_ids)
            if self._assignment.get(doc_id) == UNLABELED
        ]
        for doc_id in acquired:
            self._assignment[doc_id] = LABELED
        return acquired

    def labeled_ids(self) -> list[str]:
        return self._ids(LABELED)

    def unlabeled_ids(self) -> list[str]:
        return self._ids(UNLABELED)

    def test_ids(self) -> list[str]:
        return self._ids(TEST)

    def to_splits(self) -> DatasetSplits:
        return DatasetSplits(
            labeled=self.labeled_ids(),
            unlabeled=self.unlabeled_ids(),
            test=self.test_ids(),
        )

    def _ids(self, tag: str) -> list[str]:
        return sorted(doc_id for doc_id, split in self._assignment.items() if split == tag)
