"""
Catalog synchronizer: keeps the local working copy in step with the remote.

States of the local copy and what happens:

    absent              → clone            (failure is fatal: CatalogCloneError)
    present, clean      → pull             (failure → warning, copy untouched)
    present, unmerged   → reset --merge (or rebase --abort), then as modified
    present, modified   → stash + reset HEAD, then
                          pull → fetch + reset --hard origin/<branch>
                                           (exhausted → warning)

Nothing here ever asks the operator to resolve a git conflict. After any
successful sync every unit payload is made executable.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from provisioner.adapters.vcs.git import GitAdapter
from provisioner.core.catalog.store import make_units_executable
from provisioner.core.errors import CatalogCloneError
from provisioner.core.models.config import RunConfig
from provisioner.core.models.receipt import Receipt
from provisioner.core.models.sync import SyncOutcome, SyncReport
from provisioner.core.reliability.recovery import RecoveryChain, RecoveryStrategy

logger = logging.getLogger(__name__)

REMOTE = "origin"

# Recovery strategy → how the sync is reported when it wins
_OUTCOMES = {
    "pull": SyncOutcome.UPDATED,
    "fetch-reset": SyncOutcome.FORCED,
}

_MESSAGES = {
    SyncOutcome.CLONED: "Repository cloned successfully.",
    SyncOutcome.UPDATED: "Repository updated successfully.",
    SyncOutcome.FORCED: "Repository updated successfully (forced update).",
}


class CatalogSynchronizer:
    """Clone or update the module repository described by ``config``."""

    def __init__(self, config: RunConfig, git: GitAdapter):
        self._config = config
        self._git = git

    @property
    def repo_dir(self) -> Path:
        return self._config.module_repo_dir

    def sync(self) -> SyncReport:
        """Synchronize once.

        Raises:
            CatalogCloneError: If there is no local copy and cloning fails.
        """
        logger.info("Starting repository sync from %s.", self._config.git_repo_url)

        if not self._config.is_cloned:
            report = self._clone()
        else:
            report = self._update()

        if report.ok:
            report.units_made_executable = make_units_executable(
                self.repo_dir, self._config.unit_suffix
            )
        return report

    # ── Absent ──────────────────────────────────────────────────

    def _clone(self) -> SyncReport:
        logger.info("Cloning repository for the first time.")
        receipt = self._git.clone(self._config.git_repo_url, self.repo_dir)
        if not receipt.ok:
            logger.error("Failed to clone repository: %s", receipt.error)
            raise CatalogCloneError(
                f"Failed to clone {self._config.git_repo_url} into {self.repo_dir}. "
                f"Check URL and permissions.\n{receipt.error or ''}".rstrip()
            )
        logger.info("Repository cloned successfully.")
        return SyncReport(
            outcome=SyncOutcome.CLONED, message=_MESSAGES[SyncOutcome.CLONED], steps=[receipt]
        )

    # ── Present ─────────────────────────────────────────────────

    def _update(self) -> SyncReport:
        logger.info("Repository exists. Pulling latest changes.")
        steps: list[Receipt] = []

        status = self._git.status(self.repo_dir)
        steps.append(status)
        if not status.ok:
            return self._warning(
                steps, f"Cannot read repository status: {status.error}"
            )

        dirty = bool(status.metadata.get("dirty"))
        if status.metadata.get("unmerged"):
            logger.warning("Repository has an unfinished merge. Aborting it before sync.")
            abort = self._git.abort_merge(self.repo_dir)
            steps.append(abort)
            if not abort.ok:
                return self._warning(steps, f"Could not abort unfinished merge: {abort.error}")
            dirty = True

        if dirty:
            logger.warning("Repository has local changes. Stashing them before pull.")
            ok, receipts = self.quarantine_strategy().attempt()
            steps.extend(receipts)
            if not ok:
                # Stop here: resetting without a stash would discard local edits
                return self._warning(
                    steps, f"Could not set aside local changes: {receipts[-1].error}"
                )

        chain = RecoveryChain(self.recovery_strategies(dirty=dirty))
        result = chain.run()
        steps.extend(result.receipts)

        if not result.ok:
            if dirty:
                logger.error(
                    "Failed to sync repository even with force. Manual intervention may be required."
                )
            return self._warning(steps, f"Failed to pull updates: {result.last_error}")

        outcome = _OUTCOMES[result.winner]
        if outcome == SyncOutcome.FORCED:
            logger.info("Repository forcibly updated successfully.")
        else:
            logger.info("Repository updated successfully.")
        return SyncReport(outcome=outcome, message=_MESSAGES[outcome], steps=steps)

    # ── Strategies ──────────────────────────────────────────────

    def quarantine_strategy(self) -> RecoveryStrategy:
        """Stash local modifications, then hard-reset the work tree to HEAD."""
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return RecoveryStrategy(
            name="quarantine",
            steps=[
                lambda: self._git.stash(
                    self.repo_dir, f"Auto-stash before provisioner sync {stamp}"
                ),
                lambda: self._git.reset_hard(self.repo_dir, "HEAD"),
            ],
        )

    def recovery_strategies(self, dirty: bool) -> list[RecoveryStrategy]:
        """Ordered update strategies.

        A clean copy only pulls: a failed pull must leave it exactly as
        it was. A copy that had drifted also falls back to fetch + hard
        reset onto the remote head.
        """
        branch = self._config.git_branch
        return [
            RecoveryStrategy(
                name="pull",
                steps=[lambda: self._git.pull(self.repo_dir, REMOTE, branch)],
            ),
            RecoveryStrategy(
                name="fetch-reset",
                steps=[
                    lambda: self._git.fetch(self.repo_dir, REMOTE),
                    lambda: self._git.reset_hard(self.repo_dir, f"{REMOTE}/{branch}"),
                ],
                precondition=lambda: dirty,
            ),
        ]

    def _warning(self, steps: list[Receipt], detail: str) -> SyncReport:
        logger.warning("Repository sync incomplete: %s", detail)
        return SyncReport(
            outcome=SyncOutcome.WARNING,
            message="Could not sync repository. Check logs and network connectivity.",
            steps=steps,
        )
