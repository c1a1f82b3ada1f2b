"""
Sync report model: the outcome of one catalog synchronization.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from provisioner.core.models.receipt import Receipt


class SyncOutcome(StrEnum):
    """How a synchronization ended."""

    CLONED = "cloned"      # first-time clone succeeded
    UPDATED = "updated"    # pull succeeded
    FORCED = "forced"      # fetch + hard reset to remote head succeeded
    WARNING = "warning"    # local copy left as it was; see the log


class SyncReport(BaseModel):
    """Ordered record of every step a synchronization attempted."""

    outcome: SyncOutcome
    message: str = ""
    steps: list[Receipt] = Field(default_factory=list)
    units_made_executable: int = 0

    @property
    def ok(self) -> bool:
        """Whether the catalog now reflects the remote."""
        return self.outcome != SyncOutcome.WARNING

    def step_names(self) -> list[str]:
        return [r.operation for r in self.steps]
