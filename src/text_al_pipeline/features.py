"""Bag-of-words document-feature matrices.

Tokenization and counting are delegated to scikit-learn's ``CountVectorizer``;
this module adds count-based trimming and a frozen vocabulary so that every
matrix produced after ``fit`` shares the training column order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Iterable, Sequence

import numpy as np
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer

logger = logging.getLogger(__name__)

_WORD_PATTERN = re.compile(r"\w+(?:['’]\w+)*|[^\w\s]", re.UNICODE)
_PUNCT_PATTERN = re.compile(r"^[^\w\s]+$", re.UNICODE)
_NUMBER_PATTERN = re.compile(r"^\d+(?:[.,]\d+)*$")


@dataclass(frozen=True)
class FeatureConfig:
    lowercase: bool = True
    remove_punct: bool = True
    remove_numbers: bool = False
    ngram_max: int = 1
    min_termfreq: int = 1
    min_docfreq: int = 1
    stopwords: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeatureConfig":
        return cls(
            lowercase=bool(data.get("lowercase", True)),
            remove_punct=bool(data.get("remove_punct", True)),
            remove_numbers=bool(data.get("remove_numbers", False)),
            ngram_max=int(data.get("ngram_max", 1)),
            min_termfreq=int(data.get("min_termfreq", 1)),
            min_docfreq=int(data.get("min_docfreq", 1)),
            stopwords=tuple(str(word) for word in data.get("stopwords", [])),
        )

    def validate(self) -> None:
        if self.ngram_max < 1:
            raise ValueError("features.ngram_max must be >= 1.")
        if self.min_termfreq < 1:
            raise ValueError("features.min_termfreq must be >= 1.")
        if self.min_docfreq < 1:
            raise ValueError("features.min_docfreq must be >= 1.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "lowercase": self.lowercase,
            "remove_punct": self.remove_punct,
            "remove_numbers": self.remove_numbers,
            "ngram_max": self.ngram_max,
            "min_termfreq": self.min_termfreq,
            "min_docfreq": self.min_docfreq,
            "stopwords": list(self.stopwords),
        }


def tokenize(text: str, config: FeatureConfig | None = None) -> list[str]:
    config = config or FeatureConfig()
    source = text.lower() if config.lowercase else text
    tokens = _WORD_PATTERN.findall(source)
    if config.remove_punct:
        tokens = [token for token in tokens if not _PUNCT_PATTERN.match(token)]
    if config.remove_numbers:
        tokens = [token for token in tokens if not _NUMBER_PATTERN.match(token)]
    if config.stopwords:
        stopwords = {word.lower() if config.lowercase else word for word in config.stopwords}
        tokens = [token for token in tokens if token not in stopwords]
    return tokens


class DocumentFeatureMatrix:
    """Fits a trimmed vocabulary and projects documents onto it."""

    def __init__(self, config: FeatureConfig | None = None) -> None:
        self.config = config or FeatureConfig()
        self.config.validate()
        self._vectorizer: CountVectorizer | None = None

    @classmethod
    def fit(
        cls, texts: Sequence[str], config: FeatureConfig | None = None
    ) -> tuple["DocumentFeatureMatrix", sparse.csr_matrix]:
        dfm = cls(config)
        matrix = dfm.fit_transform(texts)
        return dfm, matrix

    def fit_transform(self, texts: Sequence[str]) -> sparse.csr_matrix:
        documents = list(texts)
        counting = self._new_vectorizer()
        counts = counting.fit_transform(documents)
        names = counting.get_feature_names_out()

        term_totals = np.asarray(counts.sum(axis=0)).ravel()
        doc_totals = np.asarray((counts > 0).sum(axis=0)).ravel()
        keep = (term_totals >= self.config.min_termfreq) & (
            doc_totals >= self.config.min_docfreq
        )
        if not keep.any():
            raise ValueError(
                "Trimming removed every feature; lower min_termfreq/min_docfreq."
            )
        logger.debug(
            "Trimmed vocabulary from %d to %d features.", len(names), int(keep.sum())
        )

        self._vectorizer = self._new_vectorizer(vocabulary=list(names[keep]))
        self._vectorizer.fit(documents)
        return sparse.csr_matrix(counts[:, np.flatnonzero(keep)])

    def transform(self, texts: Iterable[str]) -> sparse.csr_matrix:
        vectorizer = self._require_fitted()
        return sparse.csr_matrix(vectorizer.transform(list(texts)))

    @property
    def vocabulary(self) -> list[str]:
        return [str(name) for name in self._require_fitted().get_feature_names_out()]

    @property
    def n_features(self) -> int:
        return len(self._require_fitted().vocabulary_)

    def top_features(self, matrix: sparse.spmatrix, n: int = 10) -> list[tuple[str, int]]:
        """Most frequent features of ``matrix`` (quanteda's ``topfeatures``)."""
        if n <= 0:
            return []
        totals = np.asarray(matrix.sum(axis=0)).ravel()
        order = np.argsort(-totals, kind="stable")[:n]
        names = self.vocabulary
        return [(names[index], int(totals[index])) for index in order]

    def _new_vectorizer(self, vocabulary: list[str] | None = None) -> CountVectorizer:
        return CountVectorizer(
            tokenizer=partial(tokenize, config=self.config),
            token_pattern=None,
            lowercase=False,
            ngram_range=(1, self.config.ngram_max),
            vocabulary=vocabulary,
        )

    def _require_fitted(self) -> CountVectorizer:
        if self._vectorizer is None:
            raise RuntimeError("DocumentFeatureMatrix must be fitted before use.")
        return self._vectorizer
