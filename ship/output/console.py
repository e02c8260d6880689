"""Console output abstraction.

Stages and services report progress and diagnostics through
``ConsoleProtocol`` so the engine can run under Rich in a terminal and under
``MockConsole`` in tests. Structured diagnostics are plain ``key=value``
fields appended to a message (see ``format_fields``).

Both consoles label lines the same way (``OK``, ``error:``, ``warning:``,
``info:``), so what a test asserts on is what a user reads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "ConsoleRecord",
    "MockConsole",
    "RichConsole",
    "Style",
    "format_fields",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # structured diagnostic fields, skipped stages
    HEADER = auto()  # stage name

    def __str__(self) -> str:
        return self.name.lower()


# Leading label per style; styles missing here are printed bare.
_LABELS: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}

_RICH_STYLES: dict[Style, str] = {
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}


def format_fields(fields: Mapping[str, object]) -> str:
    """Render diagnostic fields as ``key=value`` pairs in insertion order.

    Values containing spaces are quoted so the line stays parseable.
    """
    parts: list[str] = []
    for key, value in fields.items():
        text = "" if value is None else str(value)
        if not text or any(c.isspace() for c in text):
            text = f'"{text}"'
        parts.append(f"{key}={text}")
    return " ".join(parts)


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class _LabelledConsole:
    """Maps the protocol's named methods onto one ``_emit`` per line."""

    def _emit(self, style: Style, message: str) -> None:
        raise NotImplementedError

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(style, message)

    def success(self, message: str) -> None:
        self._emit(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._emit(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._emit(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._emit(Style.INFO, message)

    def header(self, message: str) -> None:
        self._emit(Style.HEADER, message)

    def newline(self) -> None:
        self._emit(Style.DEFAULT, "")


class RichConsole(_LabelledConsole):
    """Terminal output through Rich. Messages are never parsed as markup."""

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def _emit(self, style: Style, message: str) -> None:
        from rich.text import Text

        rich_style = _RICH_STYLES.get(style, "")
        label = _LABELS.get(style)
        if style is Style.HEADER:
            self._console.print()
        if label is None:
            # Release notes and commit messages may contain [brackets].
            self._console.print(Text(message, style=rich_style))
            return
        line = Text()
        line.append(label, style=rich_style)
        line.append(f" {message}")
        self._console.print(line)


@dataclass(frozen=True, slots=True)
class ConsoleRecord:
    message: str
    style: Style


def _no_records() -> list[ConsoleRecord]:
    return []


@dataclass
class MockConsole(_LabelledConsole):
    """Captures labelled lines for assertions."""

    outputs: list[ConsoleRecord] = field(default_factory=_no_records)

    def _emit(self, style: Style, message: str) -> None:
        label = _LABELS.get(style)
        self.outputs.append(ConsoleRecord(f"{label} {message}" if label else message, style))

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def with_style(self, style: Style) -> list[str]:
        return [r.message for r in self.outputs if r.style is style]

    def has_error(self) -> bool:
        return bool(self.with_style(Style.ERROR))

    def has_warning(self) -> bool:
        return bool(self.with_style(Style.WARNING))

    def find(self, substring: str) -> list[ConsoleRecord]:
        return [r for r in self.outputs if substring in r.message]
