"""L1-regularized logistic regression with a cross-validated penalty.

The regularization path is evaluated with stratified k-fold cross-validation
on binomial deviance (log loss). ``lambda_min`` picks the strength with the
lowest mean deviance; ``lambda_1se`` picks the strongest penalty whose mean
deviance is within one standard error of that minimum. The model is then
refit on all rows at the chosen strength. ``lambda`` here is ``1 / C``.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Literal, Sequence

import numpy as np
import sklearn
from scipy import sparse
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import StratifiedKFold, validation_curve

from text_al_pipeline.errors import FeatureSpaceMismatch

logger = logging.getLogger(__name__)

LambdaRule = Literal["lambda_min", "lambda_1se"]

_VALID_LAMBDA_RULES = {"lambda_min", "lambda_1se"}
_VALID_CLASS_WEIGHTS = {None, "balanced"}
# scikit-learn 1.8 replaced penalty="l1" with l1_ratio=1.0.
_SKLEARN_VERSION = tuple(
    int(part) for part in re.match(r"(\d+)\.(\d+)", sklearn.__version__).groups()
)
_L1_RATIO_API = _SKLEARN_VERSION >= (1, 8)


@dataclass(frozen=True)
class ParallelConfig:
    """Worker pool handed to cross-validation; ``-1`` uses every core."""

    n_jobs: int = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParallelConfig":
        return cls(n_jobs=int(data.get("n_jobs", 1)))

    def validate(self) -> None:
        if self.n_jobs == 0 or self.n_jobs < -1:
            raise ValueError("parallel.n_jobs must be a positive integer or -1.")

    def to_dict(self) -> dict[str, int]:
        return {"n_jobs": self.n_jobs}


@dataclass(frozen=True)
class LassoConfig:
    n_lambdas: int = 30
    n_folds: int = 10
    lambda_rule: LambdaRule = "lambda_1se"
    min_c: float = 1e-3
    max_c: float = 1e3
    class_weight: str | None = None
    max_iter: int = 1000

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LassoConfig":
        class_weight = data.get("class_weight")
        return cls(
            n_lambdas=int(data.get("n_lambdas", 30)),
            n_folds=int(data.get("n_folds", 10)),
            lambda_rule=str(data.get("lambda_rule", "lambda_1se")),
            min_c=float(data.get("min_c", 1e-3)),
            max_c=float(data.get("max_c", 1e3)),
            class_weight=None if class_weight is None else str(class_weight),
            max_iter=int(data.get("max_iter", 1000)),
        )

    def validate(self) -> None:
        if self.n_lambdas < 1:
            raise ValueError("model.n_lambdas must be >= 1.")
        if self.n_folds < 2:
            raise ValueError("model.n_folds must be >= 2.")
        if self.lambda_rule not in _VALID_LAMBDA_RULES:
            raise ValueError(
                "model.lambda_rule must be one of "
                f"{sorted(_VALID_LAMBDA_RULES)}; got {self.lambda_rule!r}."
            )
        if self.min_c <= 0 or self.max_c < self.min_c:
            raise ValueError("model.min_c/max_c must satisfy 0 < min_c <= max_c.")
        if self.class_weight not in _VALID_CLASS_WEIGHTS:
            raise ValueError("model.class_weight must be null or 'balanced'.")
        if self.max_iter <= 0:
            raise ValueError("model.max_iter must be greater than 0.")

    def c_grid(self) -> np.ndarray:
        return np.logspace(
            math.log10(self.min_c), math.log10(self.max_c), num=self.n_lambdas
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "n_lambdas": self.n_lambdas,
            "n_folds": self.n_folds,
            "lambda_rule": self.lambda_rule,
            "min_c": self.min_c,
            "max_c": self.max_c,
            "class_weight": self.class_weight,
            "max_iter": self.max_iter,
        }


@dataclass(frozen=True)
class CrossValidationResult:
    lambdas: tuple[float, ...]
    mean_deviance: tuple[float, ...]
    se_deviance: tuple[float, ...]
    n_folds: int
    lambda_min: float
    lambda_1se: float
    selected_lambda: float


class LassoLogisticClassifier:
    """Binary lasso classifier exposing per-vector positive-class probabilities."""

    def __init__(self, config: LassoConfig | None = None, seed: int = 0) -> None:
        self.config = config or LassoConfig()
        self.config.validate()
        self.seed = seed
        self._model: LogisticRegression | None = None
        self._positive_column = 1
        self.cv_results: CrossValidationResult | None = None

    def fit(
        self,
        features: Any,
        labels: Sequence[int],
        parallel: ParallelConfig | None = None,
    ) -> "LassoLogisticClassifier":
        parallel = parallel or ParallelConfig()
        parallel.validate()
        y = np.asarray(labels, dtype=int)
        if features.shape[0] != y.shape[0]:
            raise ValueError(
                f"features has {features.shape[0]} rows but labels has {y.shape[0]}."
            )
        classes, class_counts = np.unique(y, return_counts=True)
        if not set(classes.tolist()) <= {0, 1}:
            raise ValueError("labels must be 0 or 1.")
        if len(classes) < 2:
            raise ValueError("Both classes must be present in the labeled set.")
        folds = min(self.config.n_folds, int(class_counts.min()))
        if folds < 2:
            raise ValueError(
                "Each class needs at least 2 labeled rows for cross-validation."
            )

        c_grid = self.config.c_grid()
        _train_scores, test_scores = validation_curve(
            self._estimator(C=1.0),
            features,
            y,
            param_name="C",
            param_range=c_grid,
            cv=StratifiedKFold(n_splits=folds, shuffle=True, random_state=self.seed),
            scoring="neg_log_loss",
            n_jobs=parallel.n_jobs,
        )
        self.cv_results = _summarize_path(
            c_grid, -np.asarray(test_scores), folds, self.config.lambda_rule
        )
        selected_c = 1.0 / self.cv_results.selected_lambda
        logger.info(
            "Cross-validated lasso over %d folds: lambda_min=%.5g lambda_1se=%.5g (using %s).",
            folds,
            self.cv_results.lambda_min,
            self.cv_results.lambda_1se,
            self.config.lambda_rule,
        )

        self._model = self._estimator(C=selected_c).fit(features, y)
        self._positive_column = int(np.flatnonzero(self._model.classes_ == 1)[0])
        return self

    @property
    def n_features(self) -> int:
        return int(self._require_fitted().coef_.shape[1])

    @property
    def intercept(self) -> float:
        return float(self._require_fitted().intercept_[0])

    def predict_probability(self, feature_vector: Any) -> float:
        row = self._as_row(feature_vector)
        probabilities = self._require_fitted().predict_proba(row)
        return float(probabilities[0, self._positive_column])

    def predict_proba(self, features: Any) -> np.ndarray:
        model = self._require_fitted()
        self._check_width(features.shape[1])
        return model.predict_proba(features)[:, self._positive_column]

    def predict(self, features: Any, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(features) > threshold).astype(int)

    def nonzero_coefficients(
        self, feature_names: Sequence[str]
    ) -> list[tuple[str, float]]:
        """Features kept by the lasso, largest coefficient first."""
        coefficients = self._require_fitted().coef_[0]
        if len(feature_names) != len(coefficients):
            raise FeatureSpaceMismatch(
                expected=len(coefficients), actual=len(feature_names)
            )
        kept = [
            (str(name), float(value))
            for name, value in zip(feature_names, coefficients)
            if value != 0.0
        ]
        return sorted(kept, key=lambda item: item[1], reverse=True)

    def _estimator(self, C: float) -> LogisticRegression:
        penalty = {"l1_ratio": 1.0} if _L1_RATIO_API else {"penalty": "l1"}
        return LogisticRegression(
            solver="liblinear",
            C=C,
            class_weight=self.config.class_weight,
            max_iter=self.config.max_iter,
            random_state=self.seed,
            **penalty,
        )

    def _as_row(self, feature_vector: Any) -> Any:
        if sparse.issparse(feature_vector):
            row = sparse.csr_matrix(feature_vector).reshape(1, -1)
        else:
            row = np.asarray(feature_vector, dtype=float).reshape(1, -1)
        self._check_width(row.shape[1])
        return row

    def _check_width(self, width: int) -> None:
        expected = self.n_features
        if width != expected:
            raise FeatureSpaceMismatch(expected=expected, actual=int(width))

    def _require_fitted(self) -> LogisticRegression:
        if self._model is None:
            raise RuntimeError("LassoLogisticClassifier must be fitted before use.")
        return self._model


def _summarize_path(
    c_grid: np.ndarray,
    deviance: np.ndarray,
    n_folds: int,
    lambda_rule: str,
) -> CrossValidationResult:
    # c_grid ascends, so index 0 is the strongest penalty.
    mean = deviance.mean(axis=1)
    se = deviance.std(axis=1, ddof=1) / math.sqrt(n_folds)
    best = int(np.argmin(mean))
    threshold = mean[best] + se[best]
    one_se = int(np.flatnonzero(mean <= threshold)[0])
    lambdas = 1.0 / c_grid
    lambda_min = float(lambdas[best])
    lambda_1se = float(lambdas[one_se])
    return CrossValidationResult(
        lambdas=tuple(float(value) for value in lambdas),
        mean_deviance=tuple(float(value) for value in mean),
        se_deviance=tuple(float(value) for value in se),
        n_folds=n_folds,
        lambda_min=lambda_min,
        lambda_1se=lambda_1se,
        selected_lambda=lambda_min if lambda_rule == "lambda_min" else lambda_1se,
    )
