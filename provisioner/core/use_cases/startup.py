"""
Startup use case: preflight checks and component wiring.

Order matters and mirrors what an operator would check by hand:

    1. running as root?
    2. configuration present and complete?
    3. required tools on PATH?
    4. state/log directories exist?
    5. execution log attached to logging
    6. first run → clone the catalog (fatal if it fails)

Every failure raises with a message naming the exact precondition. A
refusal before step 5 is also written, best effort, to the configured
log file (or the default one when the configuration itself is the
problem).
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from provisioner.adapters.shell.command import ShellCommandAdapter
from provisioner.adapters.vcs.git import GitAdapter
from provisioner.core.catalog.store import FileCatalogStore
from provisioner.core.config.loader import load_config
from provisioner.core.engine.runner import UnitRunner
from provisioner.core.engine.synchronizer import CatalogSynchronizer
from provisioner.core.errors import ConfigError, PreflightError
from provisioner.core.models.config import DEFAULT_LOG_FILE, RunConfig
from provisioner.core.observability.logging_config import setup_logging
from provisioner.core.persistence.execution_log import ExecutionLog
from provisioner.core.persistence.state_ledger import FileStateLedger, StateLedger
from provisioner.core.use_cases.menu import MenuDriver
from provisioner.core.use_cases.sync import sync_catalog
from provisioner.ui.presenter import Presenter

logger = logging.getLogger(__name__)

# Where refusals land before the configuration names the execution log
FALLBACK_LOG_FILE = Path(DEFAULT_LOG_FILE)


@dataclass
class Session:
    """Every component of one provisioner run, wired to one RunConfig."""

    config: RunConfig
    presenter: Presenter
    git: GitAdapter
    shell: ShellCommandAdapter
    ledger: StateLedger
    log: ExecutionLog
    catalog: FileCatalogStore
    runner: UnitRunner
    synchronizer: CatalogSynchronizer

    def menu(self) -> MenuDriver:
        return MenuDriver(
            categories=self.config.categories,
            catalog=self.catalog,
            ledger=self.ledger,
            runner=self.runner,
            synchronizer=self.synchronizer,
            presenter=self.presenter,
            log=self.log,
        )

    def sync(self):
        return sync_catalog(self.synchronizer, self.presenter, self.log.path)


def is_privileged() -> bool:
    """Whether the process runs with root rights."""
    return hasattr(os, "geteuid") and os.geteuid() == 0


def missing_tools(tools: Sequence[str]) -> list[str]:
    return [tool for tool in tools if shutil.which(tool) is None]


def build_session(
    config: RunConfig,
    presenter: Presenter,
    git: GitAdapter | None = None,
    shell: ShellCommandAdapter | None = None,
    ledger: StateLedger | None = None,
) -> Session:
    """Wire components for ``config``. Adapters can be swapped for mocks."""
    shell = shell or ShellCommandAdapter(shell=config.unit_shell)
    git = git or GitAdapter(timeout=config.git_timeout)
    ledger = ledger or FileStateLedger(config.state_file)
    log = ExecutionLog(config.log_file)
    catalog = FileCatalogStore(config.catalog_root, config.unit_suffix, config.meta_suffix)
    return Session(
        config=config,
        presenter=presenter,
        git=git,
        shell=shell,
        ledger=ledger,
        log=log,
        catalog=catalog,
        runner=UnitRunner(ledger=ledger, log=log, shell=shell, presenter=presenter),
        synchronizer=CatalogSynchronizer(config, git),
    )


def prepare(
    presenter: Presenter,
    config_path: Path | None = None,
    *,
    console_level: str = "WARNING",
    console: bool = True,
    required_tools: Sequence[str] = ("git",),
    require_root: bool = True,
    auto_sync: bool = True,
    git: GitAdapter | None = None,
    shell: ShellCommandAdapter | None = None,
) -> Session:
    """Run the preflight checks and return a ready Session.

    Raises:
        PreflightError: Not root, or a required tool is missing.
        ConfigError: Configuration file or variables missing/invalid.
        CatalogCloneError: First-run clone failed.
    """
    log_file = FALLBACK_LOG_FILE
    try:
        if require_root and not is_privileged():
            raise PreflightError("This program must be run as root. Please use sudo.")

        config = load_config(config_path)
        log_file = config.log_file

        missing = missing_tools(required_tools)
        if missing:
            raise PreflightError(
                f"Missing required dependencies: {' '.join(missing)}. "
                "Please install the missing packages and try again."
            )

        log = ExecutionLog(config.log_file)
        try:
            config.state_file.parent.mkdir(parents=True, exist_ok=True)
            log.ensure()
        except OSError as e:
            raise PreflightError(f"Cannot prepare provisioner directories: {e}") from e
    except (ConfigError, PreflightError) as e:
        _log_refusal(log_file, e, console_level)
        raise

    setup_logging(level=console_level, log_file=config.log_file, console=console)
    logger.info("Configuration loaded from %s.", config.source)

    session = build_session(config, presenter, git=git, shell=shell)

    if auto_sync and not config.is_cloned:
        logger.info("First run detected. Automatically cloning modules repository...")
        session.sync()

    return session


def _log_refusal(log_file: Path, error: Exception, console_level: str) -> None:
    """Record a startup refusal in ``log_file`` if it can be opened.

    The console handler is dropped: the caller reports the error itself.
    """
    try:
        setup_logging(level=console_level, log_file=log_file, console=False)
    except OSError as e:
        logger.debug("Cannot open %s to record startup failure: %s", log_file, e)
        return
    logger.error("Startup aborted: %s", error)
