from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class LabeledDocument:
    doc_id: str
    text: str
    label: int

    def __post_init__(self) -> None:
        if self.label not in (0, 1):
            raise ValueError(
                f"label must be 0 or 1; got {self.label!r} for {self.doc_id!r}."
            )


@dataclass(frozen=True)
class UnlabeledDocument:
    doc_id: str
    text: str

    def with_label(self, label: int) -> LabeledDocument:
        return LabeledDocument(doc_id=self.doc_id, text=self.text, label=label)


Document = Union[LabeledDocument, UnlabeledDocument]


@dataclass(frozen=True)
class DatasetSplits:
    labeled: list[str] = field(default_factory=list)
    unlabeled: list[str] = field(default_factory=list)
    test: list[str] = field(default_factory=list)

    def validate(self) -> None:
        combined = self.labeled + self.unlabeled + self.test
        unique = set(combined)
        if len(combined) != len(unique):
            raise ValueError("Duplicate sample IDs detected across splits.")

    def counts(self) -> dict[str, int]:
        return {
            "labeled": len(self.labeled),
            "unlabeled": len(self.unlabeled),
            "test": len(self.test),
        }


@dataclass(frozen=True)
class SelectionCandidate:
    sample_id: str
    score: float
    probability: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SelectionRecord:
    round_index: int
    seed: int
    strategy: str
    sample_id: str
    score: float
    probability: float
    label: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricRecord:
    round_index: int
    seed: int
    split: str
    metric: str
    value: float


@dataclass(frozen=True)
class ProfileRecord:
    round_index: int
    stage: str
    latency_ms: float
    n_jobs: int
    notes: str = ""
