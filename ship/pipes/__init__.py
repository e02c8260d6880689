"""Publishing stages, in the order they run."""

from __future__ import annotations

from ship.pipeline.pipe import Pipe

from .changelog import ChangelogPipe
from .discord import DiscordPipe
from .milestone import MilestonePipe
from .release import ReleasePipe

__all__ = [
    "ChangelogPipe",
    "DiscordPipe",
    "MilestonePipe",
    "PUBLISH_PIPES",
    "ReleasePipe",
]

# Announcements go last: they need the release URL set by the release stage.
PUBLISH_PIPES: tuple[Pipe, ...] = (
    ChangelogPipe(),
    ReleasePipe(),
    MilestonePipe(),
    DiscordPipe(),
)
