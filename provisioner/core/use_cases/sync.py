"""
Sync use case: run the synchronizer with operator feedback.

Shared by the menu's "sync" entry, the first-run auto sync, and the
``provisioner sync`` command.
"""

from __future__ import annotations

import logging
from pathlib import Path

from provisioner.core.engine.synchronizer import CatalogSynchronizer
from provisioner.core.errors import CatalogCloneError
from provisioner.core.models.sync import SyncReport
from provisioner.ui.presenter import Presenter

logger = logging.getLogger(__name__)


def sync_catalog(
    synchronizer: CatalogSynchronizer,
    presenter: Presenter,
    log_path: Path,
) -> SyncReport:
    """Synchronize and tell the operator how it went.

    Raises:
        CatalogCloneError: First-time clone failed (after showing it).
    """
    presenter.notify("Syncing Repository", "Contacting remote repository...")
    try:
        report = synchronizer.sync()
    except CatalogCloneError as e:
        presenter.message("Sync Failed", str(e), kind="error")
        raise

    if report.ok:
        presenter.message("Sync Success", report.message, kind="success")
    else:
        presenter.message(
            "Sync Failed",
            f"{report.message}\n\nDetails are in the log file: {log_path}",
            kind="warning",
        )
    return report
