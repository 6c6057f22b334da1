from __future__ import annotations

import pytest

from text_al_pipeline.contracts import SelectionCandidate
from text_al_pipeline.errors import InvalidArgument, InvalidProbability
from text_al_pipeline.strategies import (
    RandomStrategy,
    UncertaintyStrategy,
    build_strategy,
)


def _candidates(probabilities: list[float]) -> list[SelectionCandidate]:
    return [
        SelectionCandidate(
            sample_id=f"doc_{index:06d}",
            score=abs(probability - 0.5),
            probability=probability,
            metadata={"uncertainty": "distance_to_boundary"},
        )
        for index, probability in enumerate(probabilities)
    ]


def test_build_strategy_uncertainty_uses_params():
    strategy = build_strategy("uncertainty", {"tie_break": "random"})
    assert isinstance(strategy, UncertaintyStrategy)
    assert strategy.name == "uncertainty"


def test_build_strategy_random():
    assert isinstance(build_strategy(" Random "), RandomStrategy)


def test_build_strategy_rejects_unknown_name():
    with pytest.raises(ValueError, match="Unknown strategy"):
        build_strategy("entropy")


def test_uncertainty_strategy_prefers_boundary_candidates():
    strategy = build_strategy("uncertainty")
    selected = strategy.select(_candidates([0.5, 0.1, 0.9, 0.49, 0.51]), k=2)
    assert [item.sample_id for item in selected] == ["doc_000000", "doc_000003"]
    assert [item.metadata["uncertainty_rank"] for item in selected] == [0, 1]
    assert selected[0].metadata["uncertainty"] == "distance_to_boundary"


def test_uncertainty_strategy_takes_whole_pool():
    selected = UncertaintyStrategy().select(_candidates([0.2, 0.7]), k=2)
    assert [item.sample_id for item in selected] == ["doc_000001", "doc_000000"]


@pytest.mark.parametrize("strategy", [UncertaintyStrategy(), RandomStrategy()])
def test_strategies_reject_k_larger_than_pool(strategy):
    with pytest.raises(InvalidArgument, match="exceeds pool size"):
        strategy.select(_candidates([0.5, 0.2]), k=3)


def test_uncertainty_strategy_rejects_bad_probability():
    with pytest.raises(InvalidProbability):
        UncertaintyStrategy().select(_candidates([0.2, 1.2]), k=1)


@pytest.mark.parametrize("strategy", [UncertaintyStrategy(), RandomStrategy()])
def test_strategies_select_nothing_for_zero_k(strategy):
    assert strategy.select(_candidates([0.5, 0.2]), k=0) == []
    assert strategy.select([], k=0) == []


@pytest.mark.parametrize("strategy", [UncertaintyStrategy(), RandomStrategy()])
def test_strategies_reject_negative_k(strategy):
    with pytest.raises(InvalidArgument, match=">= 0"):
        strategy.select(_candidates([0.2]), k=-1)


@pytest.mark.parametrize("strategy", [UncertaintyStrategy(), RandomStrategy()])
def test_strategies_reject_positive_k_on_empty_pool(strategy):
    with pytest.raises(InvalidArgument, match="empty pool"):
        strategy.select([], k=3)


def test_random_strategy_is_seeded():
    candidates = _candidates([0.1 * step for step in range(10)])
    first = RandomStrategy().select(candidates, k=4, seed=11)
    second = RandomStrategy().select(candidates, k=4, seed=11)
    assert [item.sample_id for item in first] == [item.sample_id for item in second]
    assert len({item.sample_id for item in first}) == 4


def test_uncertainty_strategy_rejects_unknown_tie_break():
    with pytest.raises(ValueError, match="tie_break must be one of"):
        UncertaintyStrategy(tie_break="newest")
