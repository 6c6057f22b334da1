"""Uncertainty sampling against a random baseline at a fixed labeling budget.

Both strategies run on the same seeds, so seed ``s`` starts from the same
bootstrap split in either run and contributes one paired difference. The
value compared for a run is the round metric (``test_f1`` by default) at the
first round whose ``n_labeled`` reaches the budget.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from scipy import stats

from text_al_pipeline.artifacts import ArtifactStore
from text_al_pipeline.config import BootstrapConfig, ExperimentConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetPoint:
    seed: int
    run_dir: Path
    round_index: int
    n_labeled: int
    reached: bool
    value: float


@dataclass(frozen=True)
class StrategyOutcome:
    strategy_name: str
    points: list[BudgetPoint]

    @property
    def values(self) -> dict[int, float]:
        return {point.seed: point.value for point in self.points}

    @property
    def mean(self) -> float:
        return float(np.mean(list(self.values.values()))) if self.points else math.nan

    @property
    def all_reached(self) -> bool:
        return all(point.reached for point in self.points)


@dataclass(frozen=True)
class PairedDifference:
    """Uncertainty minus random over the seeds both strategies ran."""

    seeds: list[int]
    mean: float
    ci95_low: float
    ci95_high: float

    @property
    def n(self) -> int:
        return len(self.seeds)


@dataclass(frozen=True)
class ComparisonReport:
    metric: str
    target_labeled_count: int
    minimum_required_improvement: float
    random: StrategyOutcome
    uncertainty: StrategyOutcome
    difference: PairedDifference
    passed: bool
    reason: str
    json_path: Path
    markdown_path: Path

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for outcome in ("random", "uncertainty"):
            for point in payload[outcome]["points"]:
                point["run_dir"] = str(point["run_dir"])
            payload[outcome]["mean"] = getattr(self, outcome).mean
        payload["difference"]["n"] = self.difference.n
        payload["json_path"] = str(self.json_path)
        payload["markdown_path"] = str(self.markdown_path)
        return payload


def run_strategy_comparison(
    config: ExperimentConfig,
    config_source: Path | None = None,
    budget_ratio: float = 0.5,
    minimum_required_improvement: float = 0.0,
    metric: str = "test_f1",
) -> ComparisonReport:
    from text_al_pipeline.data.loader import load_corpus
    from text_al_pipeline.experiments.active_learning import run_active_learning

    if not 0 < budget_ratio <= 1:
        raise ValueError("budget_ratio must be in the range (0, 1].")
    if minimum_required_improvement < 0:
        raise ValueError("minimum_required_improvement must be >= 0.")

    corpus = load_corpus(config.dataset)
    target = labeled_budget(len(corpus.labeled_ids), config.bootstrap, budget_ratio)
    logger.info("Comparing strategies at a budget of %d labeled comments.", target)

    outcomes: dict[str, StrategyOutcome] = {}
    for strategy_name in ("random", "uncertainty"):
        summary = run_active_learning(
            replace(config, strategy_name=strategy_name),
            config_source=config_source,
            corpus=corpus,
        )
        outcomes[strategy_name] = StrategyOutcome(
            strategy_name=strategy_name,
            points=[
                budget_point(result.seed, result.run_dir, metric, target)
                for result in summary.results
            ],
        )

    difference = paired_difference(outcomes["random"], outcomes["uncertainty"])
    passed, reason = _verdict(
        outcomes["random"],
        outcomes["uncertainty"],
        difference,
        minimum_required_improvement,
    )
    stem = Path(config.output_root) / "comparison_reports" / (
        "comparison_" + datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    )
    report = ComparisonReport(
        metric=metric,
        target_labeled_count=target,
        minimum_required_improvement=minimum_required_improvement,
        random=outcomes["random"],
        uncertainty=outcomes["uncertainty"],
        difference=difference,
        passed=passed,
        reason=reason,
        json_path=stem.with_suffix(".json"),
        markdown_path=stem.with_suffix(".md"),
    )
    write_report(report)
    return report


def labeled_budget(
    n_gold_labeled: int, bootstrap: BootstrapConfig, budget_ratio: float
) -> int:
    """Labeled-set size to compare at: a share of the rows outside the test split."""
    simulated = n_gold_labeled
    if bootstrap.pool_size is not None:
        simulated = min(simulated, bootstrap.pool_size)
    return math.ceil((simulated - bootstrap.test_size) * budget_ratio)


def round_trace(run_dir: Path, metric: str) -> pd.DataFrame:
    """``n_labeled`` and ``metric`` per round of one simulated run."""
    metrics = ArtifactStore(run_dir).read_metrics()
    rows = metrics[
        (metrics["split"] == "train") & metrics["metric"].isin(["n_labeled", metric])
    ]
    if rows.empty:
        raise ValueError(f"{run_dir / 'metrics.csv'} has no round metrics.")
    trace = rows.pivot_table(
        index="round_index",
        columns="metric",
        values="value",
        aggfunc="last",
        dropna=False,
    )
    missing = {"n_labeled", metric} - set(trace.columns)
    if missing:
        raise ValueError(f"{run_dir / 'metrics.csv'} has no {sorted(missing)} rows.")
    return trace.sort_index()


def budget_point(seed: int, run_dir: Path, metric: str, target: int) -> BudgetPoint:
    trace = round_trace(run_dir, metric)
    at_budget = trace[trace["n_labeled"] >= target]
    reached = not at_budget.empty
    round_index = at_budget.index[0] if reached else trace.index[-1]
    row = trace.loc[round_index]
    return BudgetPoint(
        seed=seed,
        run_dir=run_dir,
        round_index=int(round_index),
        n_labeled=int(row["n_labeled"]),
        reached=reached,
        value=float(row[metric]),
    )


def paired_difference(
    random: StrategyOutcome, uncertainty: StrategyOutcome
) -> PairedDifference:
    seeds = sorted(set(random.values) & set(uncertainty.values))
    if not seeds:
        nan = math.nan
        return PairedDifference(seeds=[], mean=nan, ci95_low=nan, ci95_high=nan)

    treated = np.array([uncertainty.values[seed] for seed in seeds])
    baseline = np.array([random.values[seed] for seed in seeds])
    diffs = treated - baseline
    mean = float(diffs.mean())
    if len(seeds) < 2 or np.ptp(diffs) == 0:
        return PairedDifference(seeds=seeds, mean=mean, ci95_low=mean, ci95_high=mean)

    interval = stats.ttest_rel(treated, baseline).confidence_interval(0.95)
    return PairedDifference(
        seeds=seeds,
        mean=mean,
        ci95_low=float(interval.low),
        ci95_high=float(interval.high),
    )


def write_report(report: ComparisonReport) -> None:
    report.json_path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(report.to_dict(), indent=2)
    report.json_path.write_text(payload, encoding="utf-8")
    report.markdown_path.write_text(_markdown(report), encoding="utf-8")


def _verdict(
    random: StrategyOutcome,
    uncertainty: StrategyOutcome,
    difference: PairedDifference,
    minimum_required_improvement: float,
) -> tuple[bool, str]:
    if difference.n == 0:
        return False, "No seed ran under both strategies."
    if not (random.all_reached and uncertainty.all_reached):
        return False, "Some runs ended before reaching the labeling budget."
    if not difference.mean >= minimum_required_improvement:
        return False, (
            f"Mean improvement {difference.mean:.4f} is below the required "
            f"{minimum_required_improvement:.4f}."
        )
    return True, "Uncertainty sampling met the required improvement."


def _markdown(report: ComparisonReport) -> str:
    difference = report.difference
    lines = [
        "# Strategy Comparison Report",
        "",
        f"**{'PASS' if report.passed else 'FAIL'}**: {report.reason}",
        "",
        f"Budget: {report.target_labeled_count} labeled comments, "
        f"metric `{report.metric}`.",
        "",
        f"Uncertainty minus random over seeds {difference.seeds}: "
        f"{difference.mean:.4f} "
        f"(95% CI {difference.ci95_low:.4f} to {difference.ci95_high:.4f}).",
        "",
        "| strategy | seed | round | n_labeled | reached | value |",
        "|---|---|---|---|---|---|",
    ]
    for outcome in (report.random, report.uncertainty):
        lines.extend(
            f"| {outcome.strategy_name} | {point.seed} | {point.round_index} | "
            f"{point.n_labeled} | {'yes' if point.reached else 'no'} | "
            f"{point.value:.4f} |"
            for point in outcome.points
        )
    return "\n".join(lines) + "\n"
