"""Presentation layer: message boxes, prompts, menus and a log viewer."""

from __future__ import annotations

import sys

from provisioner.ui.presenter import Presenter, ScriptedPresenter
from provisioner.ui.terminal import ClickPresenter
from provisioner.ui.whiptail import WhiptailPresenter, whiptail_available

UI_CHOICES = ("auto", "whiptail", "plain")

__all__ = [
    "UI_CHOICES",
    "ClickPresenter",
    "Presenter",
    "ScriptedPresenter",
    "WhiptailPresenter",
    "select_presenter",
]


def select_presenter(ui: str = "auto", assume_yes: bool = False) -> Presenter:
    """Pick a presenter for ``--ui``.

    ``auto`` uses whiptail when it is installed and stdin is a terminal.
    """
    if ui == "whiptail":
        return WhiptailPresenter()
    if ui == "auto" and whiptail_available() and sys.stdin.isatty() and not assume_yes:
        return WhiptailPresenter()
    return ClickPresenter(assume_yes=assume_yes)
