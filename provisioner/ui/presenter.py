"""
Presentation contract: what the core needs from a terminal UI.

The menu driver and the unit runner only talk to a Presenter. Concrete
presenters: ``WhiptailPresenter`` (dialog boxes) and ``ClickPresenter``
(plain prompts). ``ScriptedPresenter`` replays canned answers in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol

MessageKind = Literal["info", "success", "warning", "error"]

# (tag, label) pairs shown in a menu; the tag is returned on selection
Choice = tuple[str, str]


class Presenter(Protocol):
    """Terminal presentation layer."""

    def message(self, title: str, text: str, kind: MessageKind = "info") -> None:
        """Blocking message box."""
        ...

    def notify(self, title: str, text: str) -> None:
        """Non-blocking status line (e.g. "Contacting remote...")."""
        ...

    def confirm(self, title: str, text: str) -> bool:
        """Yes/no question. Cancel counts as no."""
        ...

    def choose(self, title: str, prompt: str, choices: Sequence[Choice]) -> str | None:
        """Single-choice menu. Returns the chosen tag, or None on cancel/abort."""
        ...

    def show_file(self, title: str, path: Path) -> None:
        """Scrollable viewer for a text file."""
        ...


@dataclass
class ScriptedPresenter:
    """Presenter that replays queued answers and records everything shown.

    ``choices`` answers ``choose`` in order (None = cancel); ``confirms``
    answers ``confirm`` in order. Running out of answers cancels / declines,
    so a test loop always terminates.
    """

    choices: list[str | None] = field(default_factory=list)
    confirms: list[bool] = field(default_factory=list)

    messages: list[tuple[str, str, str]] = field(default_factory=list)
    notifications: list[tuple[str, str]] = field(default_factory=list)
    questions: list[tuple[str, str]] = field(default_factory=list)
    menus: list[tuple[str, list[Choice]]] = field(default_factory=list)
    viewed: list[Path] = field(default_factory=list)

    def message(self, title: str, text: str, kind: MessageKind = "info") -> None:
        self.messages.append((title, text, kind))

    def notify(self, title: str, text: str) -> None:
        self.notifications.append((title, text))

    def confirm(self, title: str, text: str) -> bool:
        self.questions.append((title, text))
        return self.confirms.pop(0) if self.confirms else False

    def choose(self, title: str, prompt: str, choices: Sequence[Choice]) -> str | None:
        self.menus.append((title, list(choices)))
        return self.choices.pop(0) if self.choices else None

    def show_file(self, title: str, path: Path) -> None:
        self.viewed.append(path)

    @property
    def message_titles(self) -> list[str]:
        return [m[0] for m in self.messages]
