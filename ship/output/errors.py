"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ship.core.errors import ErrorCode, ReleaseError
from ship.output.console import Style

if TYPE_CHECKING:
    from ship.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    match error.kind:
        case "upload_retriable":
            console.print("the upload may succeed if the release is run again", Style.DIM)
        case "upload_fatal":
            console.print("an asset with this name already exists on the release", Style.DIM)
        case _:
            pass


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "config" | "template":
            return int(ErrorCode.USER_ERROR)
        case "not_found":
            return int(ErrorCode.NOT_FOUND)
        case "remote" | "upload_fatal" | "invalid_id":
            return int(ErrorCode.PUBLISH_ERROR)
        case "upload_retriable":
            return int(ErrorCode.NETWORK_ERROR)
        case "io":
            return int(ErrorCode.IO_ERROR)
        case "cancelled":
            return int(ErrorCode.CANCELLED)
