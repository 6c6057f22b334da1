from text_al_pipeline.experiments.bootstrap import (
    BootstrapResult,
    build_bootstrap_splits,
    build_run_dir,
    initialize_run,
)

__all__ = [
    "BootstrapResult",
    "build_bootstrap_splits",
    "build_run_dir",
    "initialize_run",
]
