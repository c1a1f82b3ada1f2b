"""
Execution log: append-only audit trail shared by every component.

Lifecycle events reach the file through the ``logging`` FileHandler set
up in ``observability.logging_config``. Unit child processes write their
raw stdout/stderr straight into the same file through ``open_append()``.
The orchestration logic never reads it back; only the operator's log
viewer does.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_LOG_MODE = 0o644


class ExecutionLog:
    """Handle on the execution log file."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def ensure(self) -> None:
        """Create the log file (and directory) if it does not exist yet."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch(mode=DEFAULT_LOG_MODE, exist_ok=True)

    def open_append(self) -> BinaryIO:
        """Open the log for a child process to append raw output.

        Flushes the logging handlers first so lifecycle lines written
        before the child starts land above its output.
        """
        for handler in logging.getLogger().handlers:
            handler.flush()
        self.ensure()
        return self._path.open("ab")

    def is_empty(self) -> bool:
        """Whether there is nothing to show (missing or zero-length)."""
        try:
            return self._path.stat().st_size == 0
        except OSError:
            return True

    def read_text(self, max_bytes: int = 2_000_000) -> str:
        """Return the tail of the log for the viewer.

        Only the last ``max_bytes`` are read; unit output can be large.
        """
        if not self._path.is_file():
            return ""
        try:
            with self._path.open("rb") as f:
                size = f.seek(0, 2)
                if size > max_bytes:
                    f.seek(size - max_bytes)
                    f.readline()  # drop the partial first line
                else:
                    f.seek(0)
                data = f.read()
        except OSError as e:
            logger.error("Failed to read execution log: %s", e)
            return ""
        return data.decode("utf-8", errors="replace")
