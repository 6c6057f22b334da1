from text_al_pipeline.evaluation.metrics import (
    ConfusionMatrix,
    classification_metrics,
    confusion_matrix,
)

__all__ = [
    "ConfusionMatrix",
    "classification_metrics",
    "confusion_matrix",
]
