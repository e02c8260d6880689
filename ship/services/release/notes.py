from __future__ import annotations

from ship.core.config import NotesMode

# GitHub rejects release bodies above this many characters.
MAX_RELEASE_BODY_LENGTH = 125_000

NOTES_SEPARATOR = "\n\n"


def truncate_release_body(body: str, limit: int = MAX_RELEASE_BODY_LENGTH) -> str:
    """Cut ``body`` down to ``limit`` characters, keeping its start."""
    if len(body) <= limit:
        return body
    return body[:limit]


def merge_release_notes(existing: str, new: str, mode: NotesMode) -> str:
    """Combine the body already on the release with the newly built notes.

    ``existing`` must be the body just read from the provider, so a retried run
    appends to what the previous attempt actually stored.
    """
    match mode:
        case "replace":
            return new
        case "append":
            return existing + NOTES_SEPARATOR + new
        case "keep-existing":
            # An empty body means nothing was written yet; nothing to keep.
            return existing if existing else new
