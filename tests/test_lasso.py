from __future__ import annotations

import warnings

import numpy as np
import pytest
from scipy import sparse
from sklearn.exceptions import ConvergenceWarning

from text_al_pipeline.errors import FeatureSpaceMismatch
from text_al_pipeline.models.lasso import (
    LassoConfig,
    LassoLogisticClassifier,
    ParallelConfig,
    _summarize_path,
)


def _separable_data(n: int = 60, seed: int = 0) -> tuple[sparse.csr_matrix, np.ndarray]:
    rng = np.random.default_rng(seed)
    labels = np.array([index % 2 for index in range(n)])
    signal = labels * rng.integers(2, 5, size=n)
    noise = rng.integers(0, 2, size=(n, 4))
    features = np.column_stack([signal, 1 - labels, noise])
    return sparse.csr_matrix(features.astype(float)), labels


def _fitted(rule: str = "lambda_1se") -> LassoLogisticClassifier:
    features, labels = _separable_data()
    config = LassoConfig(n_lambdas=8, n_folds=3, lambda_rule=rule)
    return LassoLogisticClassifier(config, seed=1).fit(
        features, labels, ParallelConfig(n_jobs=1)
    )


def test_fit_learns_separable_signal():
    classifier = _fitted()
    features, labels = _separable_data(seed=5)
    predictions = classifier.predict(features)
    assert (predictions == labels).mean() > 0.9
    assert classifier.n_features == 6


def test_fit_uses_current_l1_api_without_warnings():
    features, labels = _separable_data()
    classifier = LassoLogisticClassifier(LassoConfig(n_lambdas=8, n_folds=3), seed=1)
    with warnings.catch_warnings():
        warnings.simplefilter("error", FutureWarning)
        warnings.simplefilter("error", UserWarning)
        warnings.simplefilter("ignore", ConvergenceWarning)
        classifier.fit(features, labels, ParallelConfig(n_jobs=1))
    names = [f"f{index}" for index in range(6)]
    assert 0 < len(classifier.nonzero_coefficients(names)) <= 6


def test_predict_probability_matches_batch_prediction():
    classifier = _fitted()
    features, _ = _separable_data(n=6, seed=9)
    batch = classifier.predict_proba(features)
    single = [classifier.predict_probability(features[index]) for index in range(6)]
    dense = [classifier.predict_probability(features.toarray()[index]) for index in range(6)]
    assert single == pytest.approx(batch.tolist())
    assert dense == pytest.approx(batch.tolist())
    assert all(0.0 <= value <= 1.0 for value in single)


def test_cv_results_choose_rule():
    classifier = _fitted("lambda_min")
    cv = classifier.cv_results
    assert cv is not None
    assert cv.selected_lambda == cv.lambda_min
    assert cv.lambda_1se >= cv.lambda_min
    assert len(cv.lambdas) == 8
    assert cv.n_folds == 3


def test_summarize_path_one_standard_error_rule():
    c_grid = np.array([0.01, 0.1, 1.0, 10.0])
    deviance = np.array(
        [
            [0.70, 0.72, 0.68],
            [0.43, 0.45, 0.41],
            [0.40, 0.46, 0.40],
            [0.45, 0.47, 0.43],
        ]
    )
    result = _summarize_path(c_grid, deviance, n_folds=3, lambda_rule="lambda_1se")
    assert result.lambda_min == pytest.approx(1.0)
    assert result.lambda_1se == pytest.approx(10.0)
    assert result.selected_lambda == result.lambda_1se


def test_nonzero_coefficients_are_sorted_descending():
    classifier = _fitted("lambda_min")
    names = ["signal", "negative", "n1", "n2", "n3", "n4"]
    coefficients = classifier.nonzero_coefficients(names)
    assert coefficients
    values = [value for _, value in coefficients]
    assert values == sorted(values, reverse=True)
    assert all(value != 0.0 for value in values)


def test_width_mismatch_is_rejected():
    classifier = _fitted()
    with pytest.raises(FeatureSpaceMismatch):
        classifier.predict_probability([1.0, 0.0])
    with pytest.raises(FeatureSpaceMismatch):
        classifier.predict_proba(sparse.csr_matrix(np.zeros((2, 3))))


def test_unfitted_classifier_raises():
    with pytest.raises(RuntimeError, match="must be fitted"):
        LassoLogisticClassifier().predict_probability([0.0])


def test_fit_requires_both_classes():
    features = sparse.csr_matrix(np.ones((4, 2)))
    with pytest.raises(ValueError, match="Both classes"):
        LassoLogisticClassifier().fit(features, [1, 1, 1, 1])


def test_fit_requires_two_rows_per_class():
    features = sparse.csr_matrix(np.eye(4))
    with pytest.raises(ValueError, match="at least 2 labeled rows"):
        LassoLogisticClassifier().fit(features, [1, 0, 0, 0])


def test_config_validation():
    with pytest.raises(ValueError, match="lambda_rule"):
        LassoConfig(lambda_rule="lambda_max").validate()
    with pytest.raises(ValueError, match="n_folds"):
        LassoConfig(n_folds=1).validate()
    with pytest.raises(ValueError, match="n_jobs"):
        ParallelConfig(n_jobs=0).validate()
