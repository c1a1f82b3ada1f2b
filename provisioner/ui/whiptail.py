"""
Whiptail presenter: dialog boxes on the terminal.

whiptail draws on the terminal and writes the user's answer to stderr,
so stdin/stdout stay attached to the TTY and only stderr is captured.
Exit status 0 means OK/Yes; 1 (Cancel/No) and 255 (Esc) mean cancel.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from provisioner.ui.presenter import Choice, MessageKind

logger = logging.getLogger(__name__)

WHIPTAIL = "whiptail"

BOX_WIDTH = 78
MENU_HEIGHT = 20
MENU_LIST_HEIGHT = 12


def whiptail_available() -> bool:
    return shutil.which(WHIPTAIL) is not None


def _box_height(text: str, minimum: int = 8) -> int:
    """Rough height so wrapped text fits inside the box."""
    lines = sum(max(1, len(line) // (BOX_WIDTH - 4) + 1) for line in text.splitlines() or [""])
    return max(minimum, lines + 6)


class WhiptailPresenter:
    """Presenter backed by the whiptail binary."""

    def __init__(self, binary: str = WHIPTAIL):
        self._binary = binary

    def message(self, title: str, text: str, kind: MessageKind = "info") -> None:
        self._run(["--title", title, "--msgbox", text, str(_box_height(text)), str(BOX_WIDTH)])

    def notify(self, title: str, text: str) -> None:
        self._run(["--title", title, "--infobox", text, "8", str(BOX_WIDTH)])

    def confirm(self, title: str, text: str) -> bool:
        result = self._run(["--title", title, "--yesno", text, str(_box_height(text)), str(BOX_WIDTH)])
        return result.returncode == 0

    def choose(self, title: str, prompt: str, choices: Sequence[Choice]) -> str | None:
        items: list[str] = []
        for tag, label in choices:
            items.extend([tag, label])
        list_height = min(MENU_LIST_HEIGHT, max(1, len(choices)))
        result = self._run(
            [
                "--title", title,
                "--menu", prompt,
                str(MENU_HEIGHT), str(BOX_WIDTH), str(list_height),
                *items,
            ]
        )
        if result.returncode != 0:
            return None
        answer = result.stderr.strip()
        return answer or None

    def show_file(self, title: str, path: Path) -> None:
        self._run(
            ["--title", title, "--textbox", str(path), str(MENU_HEIGHT), str(BOX_WIDTH), "--scrolltext"]
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        argv = [self._binary, *args]
        logger.debug("whiptail %s", args[:3])
        return subprocess.run(argv, stderr=subprocess.PIPE, text=True)
