"""Bag-of-words lasso classification with uncertainty-sampling active learning."""

from text_al_pipeline.config import ExperimentConfig, load_experiment_config
from text_al_pipeline.errors import (
    FeatureSpaceMismatch,
    InvalidArgument,
    InvalidProbability,
)
from text_al_pipeline.strategies.uncertainty import rank_pool, select_uncertain

__all__ = [
    "ExperimentConfig",
    "FeatureSpaceMismatch",
    "InvalidArgument",
    "InvalidProbability",
    "load_experiment_config",
    "rank_pool",
    "select_uncertain",
]
