"""Sequential runner for publishing stages.

For each stage in order: ``skip`` -> ``default`` -> ``execute``. The first
failure stops the run; later stages are never touched. Retrying is left to
the stages themselves.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from ship.core.context import ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.output.console import Style
from ship.pipeline.pipe import Pipe

__all__ = ["PipelineReport", "StageFailure", "StageOutcome", "StagePhase", "run_pipeline"]

StagePhase = Literal["default", "execute"]


@dataclass(frozen=True, slots=True)
class StageOutcome:
    stage: str
    skipped: bool


@dataclass(frozen=True, slots=True)
class StageFailure:
    stage: str
    phase: StagePhase
    error: ReleaseError

    def pretty(self) -> str:
        return f"{self.stage}: {self.phase} failed: {self.error.pretty()}"


@dataclass(frozen=True, slots=True)
class PipelineReport:
    outcomes: tuple[StageOutcome, ...]

    @property
    def ran(self) -> tuple[str, ...]:
        return tuple(o.stage for o in self.outcomes if not o.skipped)

    @property
    def skipped(self) -> tuple[str, ...]:
        return tuple(o.stage for o in self.outcomes if o.skipped)


def run_pipeline(pipes: Sequence[Pipe], ctx: ExecutionContext) -> Result[PipelineReport, StageFailure]:
    console = ctx.console
    outcomes: list[StageOutcome] = []

    for pipe in pipes:
        if ctx.cancelled:
            failure = StageFailure(
                stage=pipe.name,
                phase="default",
                error=ReleaseError(kind="cancelled", message="run cancelled"),
            )
            console.error(failure.pretty())
            return Err(failure)

        if pipe.skip(ctx):
            console.print(f"{pipe.name}: skipped", Style.DIM)
            outcomes.append(StageOutcome(stage=pipe.name, skipped=True))
            continue

        console.header(pipe.name)

        defaulted = pipe.default(ctx)
        if isinstance(defaulted, Err):
            failure = StageFailure(stage=pipe.name, phase="default", error=defaulted.error)
            console.error(failure.pretty())
            return Err(failure)

        executed = pipe.execute(ctx)
        if isinstance(executed, Err):
            failure = StageFailure(stage=pipe.name, phase="execute", error=executed.error)
            console.error(failure.pretty())
            return Err(failure)

        outcomes.append(StageOutcome(stage=pipe.name, skipped=False))

    return Ok(PipelineReport(outcomes=tuple(outcomes)))
