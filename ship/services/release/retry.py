"""Classification and retrying of release asset uploads.

A 422 from the upload endpoint means an asset with that name is already on
the release; trying again cannot help. Every other failure, including a
request that got no response at all, may succeed on a later attempt.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
from time import sleep

from ship.client.http import HttpError
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result

__all__ = [
    "UploadOutcome",
    "classify_upload",
    "retry_upload",
    "UPLOAD_RETRY_ATTEMPTS",
    "UPLOAD_RETRY_DELAY_SECONDS",
]

UPLOAD_RETRY_ATTEMPTS = 5
UPLOAD_RETRY_DELAY_SECONDS = 1.0

_ALREADY_EXISTS = 422


class UploadOutcome(Enum):
    SUCCESS = auto()
    FATAL = auto()
    RETRIABLE = auto()


def classify_upload(error: HttpError | None, status: int | None = None) -> UploadOutcome:
    """Map an upload attempt to success, fatal or retriable.

    Args:
        error: The transport/API error, or None if the call succeeded.
        status: Response status if one was received; defaults to
            ``error.status`` (0 means no response).
    """
    if error is None:
        return UploadOutcome.SUCCESS
    if error.cancelled:
        return UploadOutcome.FATAL
    code = error.status if status is None else status
    if code == _ALREADY_EXISTS:
        return UploadOutcome.FATAL
    return UploadOutcome.RETRIABLE


def retry_upload(
    attempt: Callable[[], Result[None, ReleaseError]],
    *,
    attempts: int = UPLOAD_RETRY_ATTEMPTS,
    delay: float = UPLOAD_RETRY_DELAY_SECONDS,
    on_retry: Callable[[int, ReleaseError], None] | None = None,
) -> Result[None, ReleaseError]:
    """Run ``attempt`` until it succeeds, fails fatally, or attempts run out.

    Only ``upload_retriable`` errors are re-attempted, with a linearly growing
    delay. The last error is returned when all attempts fail.
    """
    total = max(1, attempts)
    for n in range(total):
        result = attempt()
        if isinstance(result, Ok):
            return result

        error = result.error
        if error.kind != "upload_retriable" or n == total - 1:
            return Err(error)

        if on_retry is not None:
            on_retry(n + 1, error)
        sleep(delay * (n + 1))

    raise AssertionError("unreachable: retry loop always returns")
