"""
Plain terminal presenter built on click.

Used when whiptail is not installed, when stdin is not a TTY, or when
``--ui plain`` is given. Also backs the non-interactive CLI commands.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import click

from provisioner.ui.presenter import Choice, MessageKind

_STYLE: dict[str, tuple[str, str]] = {
    "info": ("ℹ️ ", "cyan"),
    "success": ("✅", "green"),
    "warning": ("⚠️ ", "yellow"),
    "error": ("❌", "red"),
}

BACK_ANSWERS = {"", "0", "b", "back", "q"}


class ClickPresenter:
    """Presenter that prints to stdout and reads answers with click.prompt.

    Args:
        assume_yes: Answer every confirmation with yes (``--yes``).
    """

    def __init__(self, assume_yes: bool = False):
        self._assume_yes = assume_yes

    def message(self, title: str, text: str, kind: MessageKind = "info") -> None:
        icon, color = _STYLE.get(kind, _STYLE["info"])
        click.secho(f"{icon} {title}", fg=color, bold=True)
        for line in text.splitlines():
            click.echo(f"   {line}")

    def notify(self, title: str, text: str) -> None:
        click.secho(f"… {text}", fg="cyan")

    def confirm(self, title: str, text: str) -> bool:
        if self._assume_yes:
            return True
        try:
            return click.confirm(text, default=False)
        except click.Abort:
            click.echo()
            return False

    def choose(self, title: str, prompt: str, choices: Sequence[Choice]) -> str | None:
        click.echo()
        click.secho(f"📋 {title}", fg="cyan", bold=True)
        width = max((len(tag) for tag, _ in choices), default=0)
        for index, (tag, label) in enumerate(choices, start=1):
            click.echo(f"   {index:>2}) {tag:<{width}}  {label}")
        click.echo("    0) Back")

        tags = {tag: tag for tag, _ in choices}
        while True:
            try:
                answer = click.prompt(prompt, default="", show_default=False).strip()
            except click.Abort:
                click.echo()
                return None

            if answer.lower() in BACK_ANSWERS:
                return None
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1][0]
            if answer in tags:
                return answer
            click.secho(f"   Invalid option '{answer}'. Please try again.", fg="red")

    def show_file(self, title: str, path: Path) -> None:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self.message(title, f"Cannot read {path}: {e}", kind="error")
            return
        click.echo_via_pager(text)
