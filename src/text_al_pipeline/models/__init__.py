from text_al_pipeline.models.lasso import (
    CrossValidationResult,
    LassoConfig,
    LassoLogisticClassifier,
    ParallelConfig,
)
from text_al_pipeline.models.runner import ModelRunner
from text_al_pipeline.models.text_lasso_runner import (
    TextLassoRunner,
    TextLassoRunnerConfig,
)

__all__ = [
    "CrossValidationResult",
    "LassoConfig",
    "LassoLogisticClassifier",
    "ModelRunner",
    "ParallelConfig",
    "TextLassoRunner",
    "TextLassoRunnerConfig",
]
