"""Error payloads and exit codes.

``ReleaseError`` is the one error value stages and services hand back. Its
``kind`` tells the caller how to react without reading the message:

- config / template: bad input, abort the stage
- not_found: an expected lookup came back empty, caller decides
- remote: a provider call failed
- upload_fatal / upload_retriable: classified asset upload failures
- invalid_id: a release id we produced could not be parsed back
- cancelled: the run was cancelled before or during a remote call
- io: local file access failed
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = ["ErrorCode", "ReleaseError", "ReleaseErrorKind"]


ReleaseErrorKind = Literal[
    "config",
    "template",
    "not_found",
    "remote",
    "upload_fatal",
    "upload_retriable",
    "invalid_id",
    "cancelled",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    def with_context(self, context: str) -> ReleaseError:
        """Return a copy whose message is prefixed with ``context``."""
        return ReleaseError(kind=self.kind, message=f"{context}: {self.message}", hint=self.hint)


class ErrorCode(IntEnum):
    """Process exit codes for the ship CLI.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad config, bad template, bad arguments)
    - 2: Not found (a looked-up remote entity does not exist)
    - 3: Publish error (a stage failed against the provider)
    - 4: Network error (provider unreachable, retries exhausted)
    - 5: I/O error (artifact or notes file unreadable)
    - 130: Cancelled
    """

    OK = 0
    USER_ERROR = 1
    NOT_FOUND = 2
    PUBLISH_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    CANCELLED = 130

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
