"""
Pipeline orchestrator: PDF -> page images -> three tone stages -> grid PDF.

The run is a strictly linear state machine with a barrier between phases.
Every intermediate lives in a per-run staging arena that is removed on
success and on failure; a failing phase's exception reaches the caller
unchanged.
"""

from .contracts import PipelineConfig, PipelineResult, PipelineState
from .logging_setup import setup_logging
from .module import DarkenPipeline, new_run_id, run_darken_pipeline

__all__ = [
    "DarkenPipeline",
    "PipelineConfig",
    "PipelineResult",
    "PipelineState",
    "new_run_id",
    "run_darken_pipeline",
    "setup_logging",
]
