"""Pipeline orchestration engine.

This package provides the main entry point for running the complete
fetch, merge and write pipeline, including configuration and result types.
"""

from pubreconcile.engine.config import PipelineConfig, PipelineResult
from pubreconcile.engine.runner import run_pipeline

__all__ = [
    "PipelineConfig",
    "PipelineResult",
    "run_pipeline",
]
