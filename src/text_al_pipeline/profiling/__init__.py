from text_al_pipeline.profiling.stage_profiler import StageProfiler

__all__ = ["StageProfiler"]
