from text_al_pipeline.strategies.base import QueryStrategy
from text_al_pipeline.strategies.random_sampling import RandomStrategy
from text_al_pipeline.strategies.uncertainty import (
    UncertaintyStrategy,
    rank_pool,
    rank_uncertain,
    select_uncertain,
    uncertainty_score,
    uncertainty_scores,
)


def build_strategy(
    name: str, params: dict[str, object] | None = None
) -> QueryStrategy:
    normalized = name.strip().lower()
    params = params or {}
    if normalized == "random":
        return RandomStrategy()
    if normalized == "uncertainty":
        return UncertaintyStrategy(tie_break=str(params.get("tie_break", "stable")))
    raise ValueError("Unknown strategy. Expected one of: random, uncertainty.")


__all__ = [
    "build_strategy",
    "QueryStrategy",
    "RandomStrategy",
    "UncertaintyStrategy",
    "rank_pool",
    "rank_uncertain",
    "select_uncertain",
    "uncertainty_score",
    "uncertainty_scores",
]
