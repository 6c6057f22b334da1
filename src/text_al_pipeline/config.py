from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from text_al_pipeline.data.loader import CorpusConfig
from text_al_pipeline.features import FeatureConfig
from text_al_pipeline.models.lasso import LassoConfig, ParallelConfig

StrategyName = Literal["random", "uncertainty"]

_SUPPORTED_STRATEGIES = {"random", "uncertainty"}
_SUPPORTED_TIE_BREAKS = {"stable", "random"}


@dataclass(frozen=True)
class BootstrapConfig:
    """How labeled rows are split for a simulated run.

    ``initial_labeled_size`` rows seed the model, ``test_size`` rows are held
    out for evaluation, and the remaining labeled rows (up to ``pool_size``
    in total, when set) form the unlabeled pool whose labels the oracle reveals.
    """

    initial_labeled_size: int
    test_size: int
    pool_size: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BootstrapConfig":
        pool_size = data.get("pool_size")
        return cls(
            initial_labeled_size=int(data["initial_labeled_size"]),
            test_size=int(data["test_size"]),
            pool_size=None if pool_size is None else int(pool_size),
        )

    def validate(self) -> None:
        if self.initial_labeled_size <= 0:
            raise ValueError("bootstrap.initial_labeled_size must be greater than 0.")
        if self.test_size < 0:
            raise ValueError("bootstrap.test_size must be >= 0.")
        if self.pool_size is not None:
            if self.pool_size <= 0:
                raise ValueError("bootstrap.pool_size must be greater than 0.")
            if self.initial_labeled_size + self.test_size >= self.pool_size:
                raise ValueError(
                    "bootstrap sizes consume the full pool. Reserve room for unlabeled data."
                )

    def to_dict(self) -> dict[str, int | None]:
        return {
            "initial_labeled_size": self.initial_labeled_size,
            "test_size": self.test_size,
            "pool_size": self.pool_size,
        }


@dataclass(frozen=True)
class ExperimentConfig:
    experiment_name: str
    output_root: str
    dataset: CorpusConfig
    strategy_name: StrategyName
    features: FeatureConfig = field(default_factory=FeatureConfig)
    model: LassoConfig = field(default_factory=LassoConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    strategy_params: dict[str, Any] = field(default_factory=dict)
    rounds: int = 1
    query_size: int = 10
    seeds: list[int] = field(default_factory=lambda: [42])
    threshold: float = 0.5
    bootstrap: BootstrapConfig = field(
        default_factory=lambda: BootstrapConfig(initial_labeled_size=50, test_size=100)
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExperimentConfig":
        return cls(
            experiment_name=str(data["experiment_name"]),
            output_root=str(data.get("output_root", "runs")),
            dataset=CorpusConfig.from_dict(dict(data["dataset"])),
            features=FeatureConfig.from_dict(dict(data.get("features", {}))),
            model=LassoConfig.from_dict(dict(data.get("model", {}))),
            parallel=ParallelConfig.from_dict(dict(data.get("parallel", {}))),
            strategy_name=str(data.get("strategy_name", "uncertainty")),
            strategy_params=dict(data.get("strategy_params", {})),
            rounds=int(data.get("rounds", 1)),
            query_size=int(data.get("query_size", 10)),
            seeds=[int(seed) for seed in data.get("seeds", [42])],
            threshold=float(data.get("threshold", 0.5)),
            bootstrap=BootstrapConfig.from_dict(
                dict(
                    data.get(
                        "bootstrap",
                        {"initial_labeled_size": 50, "test_size": 100},
                    )
                )
            ),
        )

    def validate(self) -> None:
        if not self.experiment_name:
            raise ValueError("experiment_name must not be empty.")
        if not self.output_root:
            raise ValueError("output_root must not be empty.")
        if self.strategy_name not in _SUPPORTED_STRATEGIES:
            raise ValueError(
                "strategy_name must be one of "
                f"{sorted(_SUPPORTED_STRATEGIES)}; got {self.strategy_name!r}."
            )
        tie_break = self.strategy_params.get("tie_break", "stable")
        if tie_break not in _SUPPORTED_TIE_BREAKS:
            raise ValueError(
                "strategy_params.tie_break must be one of "
                f"{sorted(_SUPPORTED_TIE_BREAKS)}; got {tie_break!r}."
            )
        if self.rounds <= 0:
            raise ValueError("rounds must be greater than 0.")
        if self.query_size <= 0:
            raise ValueError("query_size must be greater than 0.")
        if not self.seeds:
            raise ValueError("seeds must include at least one integer.")
        if self.threshold <= 0.0 or self.threshold >= 1.0:
            raise ValueError("threshold must be in the open interval (0, 1).")

        self.dataset.validate()
        self.features.validate()
        self.model.validate()
        self.parallel.validate()
        self.bootstrap.validate()
        if (
            self.bootstrap.pool_size is not None
            and self.query_size > self.bootstrap.pool_size
        ):
            raise ValueError("query_size cannot exceed bootstrap.pool_size.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "experiment_name": self.experiment_name,
            "output_root": self.output_root,
            "dataset": self.dataset.to_dict(),
            "features": self.features.to_dict(),
            "model": self.model.to_dict(),
            "parallel": self.parallel.to_dict(),
            "strategy_name": self.strategy_name,
            "strategy_params": self.strategy_params,
            "rounds": self.rounds,
            "query_size": self.query_size,
            "seeds": self.seeds,
            "threshold": self.threshold,
            "bootstrap": self.bootstrap.to_dict(),
        }


def load_experiment_config(path: str | Path) -> ExperimentConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError("Experiment configs must be JSON files.")

    raw = config_path.read_text(encoding="utf-8")
    data = json.loads(raw)
    config = ExperimentConfig.from_dict(data)
    config.validate()
    return config


def save_experiment_config(config: ExperimentConfig, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    return target
