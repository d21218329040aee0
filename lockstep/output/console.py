"""Console output abstraction.

Release services never print. They report through a ConsoleProtocol, which
the CLI backs with Rich and the tests back with MockConsole.

Every line goes to stderr: stdout is kept for `key=value` step outputs when
no CI output file is configured.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    DIM = auto()

    def __str__(self) -> str:
        return self.name.lower()


# (rich style, label printed before the message)
_RICH_STYLES: dict[Style, tuple[str, str]] = {
    Style.DEFAULT: ("", ""),
    Style.SUCCESS: ("green", "✓"),
    Style.ERROR: ("red bold", "error:"),
    Style.WARNING: ("yellow", "warning:"),
    Style.DIM: ("dim", ""),
}


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print one line; `style` only changes how it looks."""
        ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class RichConsole:
    """Rich-backed console on stderr."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console(stderr=True, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = _RICH_STYLES[style][0]
        # Changelog headers look like markup ("[Unreleased]"); never interpret them.
        self._console.print(message, style=rich_style or None, markup=False)

    def _labelled(self, style: Style, message: str) -> None:
        from rich.text import Text

        rich_style, label = _RICH_STYLES[style]
        line = Text()
        line.append(label, style=rich_style)
        line.append(f" {message}")
        self._console.print(line)

    def success(self, message: str) -> None:
        self._labelled(Style.SUCCESS, message)

    def warning(self, message: str) -> None:
        self._labelled(Style.WARNING, message)

    def error(self, message: str) -> None:
        self._labelled(Style.ERROR, message)


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


def _no_records() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Records every line instead of printing it."""

    outputs: list[OutputRecord] = field(default_factory=_no_records)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.print(f"OK {message}", Style.SUCCESS)

    def warning(self, message: str) -> None:
        self.print(f"warning: {message}", Style.WARNING)

    def error(self, message: str) -> None:
        self.print(f"error: {message}", Style.ERROR)

    # Assertions helpers

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has(self, style: Style) -> bool:
        return any(o.style is style for o in self.outputs)

    def has_error(self) -> bool:
        return self.has(Style.ERROR)

    def has_warning(self) -> bool:
        return self.has(Style.WARNING)

    def has_success(self) -> bool:
        return self.has(Style.SUCCESS)

    def find(self, substring: str) -> list[OutputRecord]:
        """Records whose message contains `substring`."""
        return [o for o in self.outputs if substring in o.message]
