"""Stage contract and the sequential pipeline runner."""

from .engine import PipelineReport, StageFailure, StageOutcome, run_pipeline
from .pipe import Pipe

__all__ = [
    "Pipe",
    "PipelineReport",
    "StageFailure",
    "StageOutcome",
    "run_pipeline",
]
