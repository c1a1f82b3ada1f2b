"""
Error taxonomy for the provisioner.

Fatal errors stop the process with exit code 1. Recoverable errors are
surfaced to the operator and control returns to the calling menu.
Adapter failures are never raised; they come back as failed receipts.
"""

from __future__ import annotations

from pathlib import Path


class ProvisionerError(Exception):
    """Base class for all provisioner errors."""


class ConfigError(ProvisionerError):
    """Raised when the run configuration is missing or invalid."""


class PreflightError(ProvisionerError):
    """Raised when a startup precondition is not met (privileges, tools)."""


class CatalogCloneError(ProvisionerError):
    """Raised when the first-time clone of the catalog fails."""


class LedgerError(ProvisionerError):
    """Raised when the state ledger cannot be read or appended to."""


class CategoryUnavailable(ProvisionerError):
    """Raised when a category directory does not exist.

    This is a user-facing condition (usually: catalog not synced yet),
    never a reason to stop the process.
    """

    def __init__(self, category: str, path: Path):
        self.category = category
        self.path = path
        super().__init__(f"Module directory '{path}' does not exist.")
