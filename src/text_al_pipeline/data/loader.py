from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from text_al_pipeline.contracts import Document, LabeledDocument, UnlabeledDocument

logger = logging.getLogger(__name__)

_TRUE_TOKENS = {"1", "1.0", "true", "yes"}
_FALSE_TOKENS = {"0", "0.0", "false", "no"}


@dataclass(frozen=True)
class CorpusConfig:
    name: str
    path: str
    text_column: str = "text"
    label_column: str = "label"
    id_column: str | None = None
    version: str = "unknown"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CorpusConfig":
        id_column = data.get("id_column")
        return cls(
            name=str(data["name"]),
            path=str(data["path"]),
            text_column=str(data.get("text_column", "text")),
            label_column=str(data.get("label_column", "label")),
            id_column=None if id_column is None else str(id_column),
            version=str(data.get("version", "unknown")),
        )

    def validate(self) -> None:
        if not self.name:
            raise ValueError("dataset.name must not be empty.")
        if not self.path:
            raise ValueError("dataset.path must not be empty.")
        if not self.text_column:
            raise ValueError("dataset.text_column must not be empty.")
        if not self.label_column:
            raise ValueError("dataset.label_column must not be empty.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "text_column": self.text_column,
            "label_column": self.label_column,
            "id_column": self.id_column,
            "version": self.version,
        }


class Corpus:
    """Documents indexed by ID, in file order."""

    def __init__(self, documents: Iterable[Document]) -> None:
        self._documents: dict[str, Document] = {}
        for document in documents:
            if document.doc_id in self._documents:
                raise ValueError(f"Duplicate document ID: {document.doc_id!r}.")
            self._documents[document.doc_id] = document

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __getitem__(self, doc_id: str) -> Document:
        return self._documents[doc_id]

    @property
    def ids(self) -> list[str]:
        return list(self._documents)

    @property
    def labeled_ids(self) -> list[str]:
        return [
            doc_id
            for doc_id, document in self._documents.items()
            if isinstance(document, LabeledDocument)
        ]

    @property
    def unlabeled_ids(self) -> list[str]:
        return [
            doc_id
            for doc_id, document in self._documents.items()
            if isinstance(document, UnlabeledDocument)
        ]

    def without_labels(self, doc_ids: Iterable[str]) -> "Corpus":
        """Copy of the corpus with the given documents' labels hidden."""
        hidden = set(doc_ids)
        return Corpus(
            UnlabeledDocument(doc_id=document.doc_id, text=document.text)
            if document.doc_id in hidden
            else document
            for document in self._documents.values()
        )

    def record_labels(self, labels: Mapping[str, int]) -> None:
        for doc_id, label in labels.items():
            document = self._documents[doc_id]
            if isinstance(document, LabeledDocument):
                if document.label != label:
                    raise ValueError(
                        f"Document {doc_id!r} is already labeled {document.label}; "
                        f"got {label}."
                    )
                continue
            self._documents[doc_id] = document.with_label(int(label))

    def texts(self, doc_ids: Sequence[str]) -> list[str]:
        return [self._documents[doc_id].text for doc_id in doc_ids]

    def labels(self, doc_ids: Sequence[str]) -> list[int]:
        labels: list[int] = []
        for doc_id in doc_ids:
            document = self._documents[doc_id]
            if not isinstance(document, LabeledDocument):
                raise ValueError(f"Document {doc_id!r} has no label.")
            labels.append(document.label)
        return labels


def load_corpus(config: CorpusConfig) -> Corpus:
    path = Path(config.path)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")
    frame = pd.read_csv(path, dtype=str, keep_default_na=True)
    corpus = Corpus(documents_from_frame(frame, config))
    logger.info(
        "Loaded %d documents from %s (%d labeled, %d unlabeled).",
        len(corpus),
        path,
        len(corpus.labeled_ids),
        len(corpus.unlabeled_ids),
    )
    return corpus


def documents_from_frame(frame: pd.DataFrame, config: CorpusConfig) -> list[Document]:
    required = [config.text_column]
    if config.id_column is not None:
        required.append(config.id_column)
    missing = [column for column in required if column not in frame.columns]
    if missing:
        raise ValueError(f"Corpus is missing required column(s): {missing}.")

    has_labels = config.label_column in frame.columns
    documents: list[Document] = []
    for position, record in enumerate(frame.to_dict(orient="records")):
        doc_id = (
            str(record[config.id_column])
            if config.id_column is not None
            else f"doc_{position:06d}"
        )
        text = record[config.text_column]
        text = "" if pd.isna(text) else str(text)
        label = parse_label(record[config.label_column]) if has_labels else None
        if label is None:
            documents.append(UnlabeledDocument(doc_id=doc_id, text=text))
        else:
            documents.append(LabeledDocument(doc_id=doc_id, text=text, label=label))
    return documents


def parse_label(raw: object) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, float) and pd.isna(raw):
        return None
    token = str(raw).strip().lower()
    if token in {"", "na", "nan", "none"}:
        return None
    if token in _TRUE_TOKENS:
        return 1
    if token in _FALSE_TOKENS:
        return 0
    raise ValueError(f"Label must be 0/1 or missing; got {raw!r}.")
