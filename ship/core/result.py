"""Result type used for every fallible operation in ship.

Remote calls, template rendering and config loading return ``Ok(value)`` or
``Err(error)`` instead of raising, so a stage can decide what a failure means
(retry, warn, abort) by looking at the error value:

    release = api.get_release_by_tag(repo, "v1.2.0")
    if isinstance(release, Err):
        return Err(remote_error("get release by tag", release.error))
    if release.value is None:
        ...  # no release for this tag yet

``unwrap`` exists for tests and for values whose failure is a programming
error; production code branches with ``isinstance`` or ``match``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn

__all__ = ["Err", "Ok", "Result", "UnwrapError"]


class UnwrapError(ValueError):
    """Raised by ``Err.unwrap``; carries the original error value."""

    def __init__(self, error: object) -> None:
        super().__init__(f"called unwrap on Err: {error}")
        self.error = error


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def unwrap(self) -> T:
        return self.value

    def unwrap_or[D](self, default: D) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def unwrap(self) -> NoReturn:
        raise UnwrapError(self.error)

    def unwrap_or[D](self, default: D) -> D:
        return default

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
