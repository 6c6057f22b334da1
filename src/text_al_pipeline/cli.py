from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path

from text_al_pipeline.config import load_experiment_config
from text_al_pipeline.experiments.bootstrap import initialize_run


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Train a bag-of-words lasso classifier on labeled comments and pick "
            "the most uncertain unlabeled comments for annotation."
        )
    )
    parser.add_argument(
        "--mode",
        choices=["bootstrap", "classify", "select", "active_learning", "compare"],
        default="classify",
        help="Execution mode. Use 'bootstrap' to write splits and artifacts only.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/attacks_lasso.json"),
        help="Path to a JSON experiment config.",
    )
    parser.add_argument(
        "--select-count",
        type=int,
        default=None,
        help="Number of unlabeled comments to select (defaults to query_size).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV written by 'select' mode (defaults to <output_root>/to_label.csv).",
    )
    parser.add_argument(
        "--budget-ratio",
        type=float,
        default=0.5,
        help="Share of the trainable rows used as the labeling budget in 'compare'.",
    )
    parser.add_argument(
        "--min-improvement",
        type=float,
        default=0.0,
        help="Minimum uncertainty-minus-random F1 improvement required in 'compare'.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_experiment_config(args.config)

    if args.mode == "bootstrap":
        result = initialize_run(config, config_source=args.config)
        print(f"Initialized run directory: {result.run_dir}")
        print(
            "Split sizes: "
            f"L={result.labeled_count}, "
            f"U={result.unlabeled_count}, "
            f"T={result.test_count}"
        )
        return 0

    if args.mode == "classify":
        from text_al_pipeline.experiments.classification import run_classification

        result = run_classification(config, config_source=args.config)
        print(f"Run directory: {result.run_dir}")
        print(
            f"Train={result.train_count}, Test={result.test_count}, "
            f"features={result.n_features}, lambda={result.selected_lambda:.6g}"
        )
        for name in ("accuracy", "precision", "recall", "f1"):
            print(f"{name}: {_format_metric(result.metrics[name])}")
        print(f"Predictions: {result.predictions_path}")
        print(f"Coefficients: {result.coefficients_path}")
        return 0

    if args.mode == "select":
        from text_al_pipeline.experiments.selection import run_uncertainty_selection

        count = args.select_count if args.select_count is not None else config.query_size
        output = args.output or Path(config.output_root) / "to_label.csv"
        result = run_uncertainty_selection(config, count, output)
        print(
            f"Selected {len(result.selected)} of {result.unlabeled_count} unlabeled "
            f"comment(s) using {result.labeled_count} labeled comment(s)."
        )
        print(f"Worklist: {result.output_path}")
        return 0

    if args.mode == "active_learning":
        from text_al_pipeline.experiments.active_learning import run_active_learning

        summary = run_active_learning(config, config_source=args.config)
        print(f"Completed active learning for {len(summary.results)} seed(s).")
        for seed_result in summary.results:
            print(
                f"Seed {seed_result.seed}: run_dir={seed_result.run_dir}, "
                f"L={seed_result.final_labeled_count}, "
                f"U={seed_result.final_unlabeled_count}"
            )
        return 0

    from text_al_pipeline.evaluation.comparison import run_strategy_comparison

    report = run_strategy_comparison(
        config,
        config_source=args.config,
        budget_ratio=args.budget_ratio,
        minimum_required_improvement=args.min_improvement,
    )
    print(f"Comparison status: {'PASS' if report.passed else 'FAIL'}")
    print(f"Reason: {report.reason}")
    difference = report.difference
    print(
        f"Paired improvement in {report.metric} (uncertainty-random): "
        f"{difference.mean:.6f} "
        f"(95% CI: {difference.ci95_low:.6f}, {difference.ci95_high:.6f})"
    )
    print(f"Report JSON: {report.json_path}")
    print(f"Report Markdown: {report.markdown_path}")
    return 0


def _format_metric(value: float) -> str:
    return "n/a" if math.isnan(value) else f"{value:.4f}"
