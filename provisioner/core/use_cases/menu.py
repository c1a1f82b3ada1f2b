"""
Menu driver: the interactive session.

States and transitions:

    MainMenu ──category──▶ CategoryMenu(c) ──unit──▶ RunUnit ──▶ CategoryMenu(c)
       │  ▲                     │
       │  └──────back/cancel────┘
       ├──sync──▶ Synchronizer ──▶ MainMenu
       ├──log───▶ log viewer   ──▶ MainMenu
       └──exit/cancel──▶ Exit

Cancel always returns to the immediate parent; it never skips a level.
Units are discovered again on every render of a category menu.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from provisioner.core.catalog.store import CatalogStore
from provisioner.core.engine.runner import UnitRunner
from provisioner.core.engine.synchronizer import CatalogSynchronizer
from provisioner.core.errors import CategoryUnavailable, LedgerError
from provisioner.core.models.unit import Unit
from provisioner.core.persistence.execution_log import ExecutionLog
from provisioner.core.persistence.state_ledger import StateLedger
from provisioner.core.use_cases.sync import sync_catalog
from provisioner.ui.presenter import Choice, Presenter

logger = logging.getLogger(__name__)

MAIN_TITLE = "Enterprise Provisioner Main Menu"

ACTION_SYNC = "sync"
ACTION_LOG = "log"
ACTION_EXIT = "exit"

COMPLETED_MARK = "[X]"
PENDING_MARK = "[ ]"

# Main-menu label and submenu title for the well-known categories
CATEGORY_LABELS: dict[str, tuple[str, str]] = {
    "install": ("Install a Package", "Package Installation Modules"),
    "setup": ("Run a Server Setup", "Server Setup Modules"),
    "tools": ("Use Common Tools", "Common Tools Modules"),
}


class MenuState(StrEnum):
    MAIN = "main"
    CATEGORY = "category"
    RUN_UNIT = "run_unit"
    EXIT = "exit"


def category_label(category: str) -> str:
    known = CATEGORY_LABELS.get(category)
    return known[0] if known else category.replace("-", " ").title()


def category_title(category: str) -> str:
    known = CATEGORY_LABELS.get(category)
    if known:
        return known[1]
    return f"{category.replace('-', ' ').title()} Modules"


def unit_choices(units: list[Unit], completed: set[str]) -> list[Choice]:
    """Menu entries: unit_id → '[X] description' / '[ ] description'."""
    return [
        (unit.unit_id, f"{COMPLETED_MARK if unit.key in completed else PENDING_MARK} {unit.description}")
        for unit in units
    ]


@dataclass
class MenuDriver:
    """Interactive menu loop over one catalog."""

    categories: tuple[str, ...]
    catalog: CatalogStore
    ledger: StateLedger
    runner: UnitRunner
    synchronizer: CatalogSynchronizer
    presenter: Presenter
    log: ExecutionLog

    def run(self) -> int:
        """Drive the session until the operator exits. Returns the exit code.

        Raises:
            CatalogCloneError: A sync had to clone and the clone failed.
        """
        state = MenuState.MAIN
        category: str | None = None
        selected: Unit | None = None

        while state != MenuState.EXIT:
            if state == MenuState.MAIN:
                state, category = self._main_menu()
            elif state == MenuState.CATEGORY:
                assert category is not None
                state, selected = self._category_menu(category)
            elif state == MenuState.RUN_UNIT:
                assert selected is not None
                self._run_unit(selected)
                state = MenuState.CATEGORY

        logger.info("User exited the provisioner.")
        return 0

    # ── States ──────────────────────────────────────────────────

    def main_choices(self) -> list[Choice]:
        choices: list[Choice] = [(c, category_label(c)) for c in self.categories]
        choices += [
            (ACTION_SYNC, "Sync Scripts from Git"),
            (ACTION_LOG, "View Execution Log"),
            (ACTION_EXIT, "Exit"),
        ]
        return choices

    def _main_menu(self) -> tuple[MenuState, str | None]:
        choice = self.presenter.choose(MAIN_TITLE, "Choose an option", self.main_choices())

        if choice is None or choice == ACTION_EXIT:
            return MenuState.EXIT, None
        if choice == ACTION_SYNC:
            sync_catalog(self.synchronizer, self.presenter, self.log.path)
            return MenuState.MAIN, None
        if choice == ACTION_LOG:
            self._show_log()
            return MenuState.MAIN, None
        if choice in self.categories:
            return MenuState.CATEGORY, choice

        logger.debug("Ignoring unknown main-menu choice %r", choice)
        return MenuState.MAIN, None

    def _category_menu(self, category: str) -> tuple[MenuState, Unit | None]:
        try:
            units = self.catalog.list_units(category)
        except CategoryUnavailable as e:
            logger.warning("Category '%s' unavailable: %s", category, e.path)
            self.presenter.message(
                "Directory Not Found",
                f"Module directory '{e.path}' does not exist.\n\n"
                "Make sure the repository is synced properly.",
                kind="warning",
            )
            return MenuState.MAIN, None

        if not units:
            self.presenter.message(
                "No Modules Found",
                f"No modules were found in '{self.catalog.category_path(category)}'.\n\n"
                "Make sure the repository is synced and contains scripts in this category.",
                kind="warning",
            )
            return MenuState.MAIN, None

        try:
            completed = self.ledger.completed()
        except LedgerError as e:
            self._ledger_failed(category, e)
            return MenuState.MAIN, None

        choice = self.presenter.choose(
            category_title(category), "Choose a module to run", unit_choices(units, completed)
        )
        if choice is None:
            return MenuState.MAIN, None

        by_id = {u.unit_id: u for u in units}
        if choice not in by_id:
            return MenuState.CATEGORY, None
        return MenuState.RUN_UNIT, by_id[choice]

    def _run_unit(self, unit: Unit) -> None:
        try:
            self.runner.run(unit)
        except LedgerError as e:
            self._ledger_failed(unit.key, e)

    def _ledger_failed(self, subject: str, error: LedgerError) -> None:
        logger.error("State ledger error (%s): %s", subject, error)
        self.presenter.message(
            "State Ledger Error",
            f"{error}\n\nCheck the log file for details: {self.log.path}",
            kind="error",
        )

    def _show_log(self) -> None:
        if self.log.is_empty():
            self.presenter.message("Execution Log", "Log file is empty or does not exist.")
            return
        self.presenter.show_file("Execution Log", self.log.path)
