"""Execution context shared by every stage of one publish run.

The context is created once by the CLI (or a test), handed by reference to
each stage in order, and discarded when the run ends. Stages may update it
(config defaults, release notes, release URL), but there is no module-level
state anywhere else.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .config import Config, PrereleaseMode

if TYPE_CHECKING:
    from ship.client.http import HttpClient
    from ship.output.console import ConsoleProtocol

__all__ = ["Artifact", "ExecutionContext", "GitInfo", "resolve_prerelease"]


# Anything after MAJOR.MINOR.PATCH that starts with "-" is a pre-release suffix.
_PRERELEASE_RE = re.compile(r"^v?\d+\.\d+\.\d+-[0-9A-Za-z.-]+(\+[0-9A-Za-z.-]+)?$")


@dataclass(frozen=True, slots=True)
class GitInfo:
    current_tag: str
    previous_tag: str = ""
    commit: str = ""

    @property
    def short_commit(self) -> str:
        return self.commit[:7]


@dataclass(frozen=True, slots=True)
class Artifact:
    """A locally built file to attach to the release."""

    name: str
    path: Path


def _empty_artifacts() -> list[Artifact]:
    return []


def _empty_urls() -> list[str]:
    return []


@dataclass(slots=True)
class ExecutionContext:
    config: Config
    git: GitInfo
    console: ConsoleProtocol
    http: HttpClient
    token: str = ""
    env: Mapping[str, str] = field(default_factory=dict)
    prerelease: bool = False
    artifacts: list[Artifact] = field(default_factory=_empty_artifacts)
    release_notes: str | None = None
    release_id: str | None = None
    release_url: str = ""
    uploaded_urls: list[str] = field(default_factory=_empty_urls)
    cancel: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel.is_set()

    def template_vars(self, **extra: object) -> dict[str, object]:
        """Variables available to user templates during this run."""
        tag = self.git.current_tag
        out: dict[str, object] = {
            "project_name": self.config.project_name,
            "tag": tag,
            "previous_tag": self.git.previous_tag,
            "version": tag.removeprefix("v"),
            "commit": self.git.commit,
            "short_commit": self.git.short_commit,
            "prerelease": self.prerelease,
            "release_url": self.release_url,
        }
        out.update(extra)
        return out


def resolve_prerelease(mode: PrereleaseMode, tag: str) -> bool:
    """Decide the pre-release flag for ``tag``.

    ``auto`` marks tags with a semver pre-release suffix (``v1.0.0-rc.1``).
    """
    match mode:
        case "true":
            return True
        case "false":
            return False
        case "auto":
            return _PRERELEASE_RE.match(tag) is not None
