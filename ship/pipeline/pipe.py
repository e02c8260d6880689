from __future__ import annotations

from typing import Protocol, runtime_checkable

from ship.core.context import ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Result


@runtime_checkable
class Pipe(Protocol):
    """One publishing stage.

    A stage with nothing to do still implements all three operations:
    ``skip`` returns False, ``default`` and ``execute`` return ``Ok(None)``.
    ``default`` must be idempotent and only touch the stage's own config.
    """

    name: str

    def skip(self, ctx: ExecutionContext) -> bool: ...

    def default(self, ctx: ExecutionContext) -> Result[None, ReleaseError]: ...

    def execute(self, ctx: ExecutionContext) -> Result[None, ReleaseError]: ...
