"""
Receipt model: the outcome of one external operation.

Adapters return receipts, never exceptions. A receipt records what was
run, whether it succeeded, and enough output to explain a failure.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of running a unit or a version-control command.

    ``operation`` names what was attempted, e.g. ``unit:install/docker``
    or ``git:pull``.
    """

    operation: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    return_code: int | None = None
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the operation failed."""
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, operation: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(operation=operation, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, operation: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(operation=operation, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, operation: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(operation=operation, status="skipped", output=reason, **kwargs)
