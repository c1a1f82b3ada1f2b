"""
Unit runner: executes exactly one unit and records the outcome.

Flow:
    already completed? → confirm re-run → run child process → ledger → notify

Failure isolation: a unit that exits non-zero (or cannot even be spawned)
leaves the state ledger untouched and returns a failed receipt. Nothing
here raises for a failed unit, so the menu loop always continues.
"""

from __future__ import annotations

import logging
from pathlib import Path

from provisioner.adapters.shell.command import ShellCommandAdapter
from provisioner.core.catalog.store import CatalogStore
from provisioner.core.models.receipt import Receipt
from provisioner.core.models.unit import Unit, split_key
from provisioner.core.persistence.execution_log import ExecutionLog
from provisioner.core.persistence.state_ledger import StateLedger
from provisioner.ui.presenter import Presenter

logger = logging.getLogger(__name__)


class UnitNotFound(LookupError):
    """Raised by ``run_key`` when no unit has the given key."""


class UnitRunner:
    """Runs units as isolated child processes.

    Args:
        ledger: Where successful runs are recorded.
        log: Execution log receiving the child's stdout/stderr.
        shell: Child-process adapter.
        presenter: Used for the re-run question and the outcome message.
        workdir: Working directory for units (default: /).
    """

    def __init__(
        self,
        ledger: StateLedger,
        log: ExecutionLog,
        shell: ShellCommandAdapter,
        presenter: Presenter,
        workdir: Path = Path("/"),
    ):
        self._ledger = ledger
        self._log = log
        self._shell = shell
        self._presenter = presenter
        self._workdir = workdir

    def run(self, unit: Unit) -> Receipt:
        """Run ``unit`` and return its receipt.

        Raises:
            LedgerError: If the ledger cannot be read or appended to.
        """
        key = unit.key
        operation = f"unit:{key}"

        if self._ledger.has_completed(key):
            rerun = self._presenter.confirm(
                "Module Already Run",
                f"'{key}' has already been run successfully. Do you want to run it again?",
            )
            if not rerun:
                logger.info("Skipping already completed module: %s", key)
                return Receipt.skip(operation=operation, reason="already completed")

        logger.info("Executing module: %s", key)
        try:
            with self._log.open_append() as output:
                receipt = self._shell.run_script(
                    unit.path, operation=operation, output=output, cwd=self._workdir
                )
        except OSError as e:
            receipt = Receipt.failure(
                operation=operation, error=f"Cannot open execution log {self._log.path}: {e}"
            )

        if receipt.ok:
            self._ledger.mark_completed(key)
            logger.info("Module '%s' completed successfully.", key)
            self._presenter.message(
                "Execution Success",
                f"Module '{unit.unit_id}' ran successfully. View log for details.",
                kind="success",
            )
        else:
            logger.error(
                "Module '%s' failed during execution: %s", key, receipt.error or "unknown error"
            )
            self._presenter.message(
                "Execution Failed",
                f"Module '{unit.unit_id}' failed. "
                f"Please check the log file for details: {self._log.path}",
                kind="error",
            )
        return receipt

    def run_key(self, key: str, catalog: CatalogStore) -> Receipt:
        """Look up ``category/unit_id`` in ``catalog`` and run it.

        Raises:
            ValueError: If ``key`` is not a composite key.
            CategoryUnavailable: If the category does not exist.
            UnitNotFound: If the category has no such unit.
        """
        category, unit_id = split_key(key)
        for unit in catalog.list_units(category):
            if unit.unit_id == unit_id:
                return self.run(unit)
        raise UnitNotFound(
            f"No module '{unit_id}' in {catalog.category_path(category)}"
        )
