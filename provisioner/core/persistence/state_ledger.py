"""
State ledger: durable set of units that completed successfully.

Stored as newline-delimited composite keys (``category/unit_id``).
The file is only ever appended to; existing lines are never rewritten,
so a failed write cannot damage entries already recorded.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from provisioner.core.errors import LedgerError

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_MODE = 0o644


class StateLedger(Protocol):
    """Set of completed unit keys with insert-if-absent semantics."""

    def has_completed(self, key: str) -> bool:
        ...

    def mark_completed(self, key: str) -> None:
        ...

    def completed(self) -> set[str]:
        ...


class FileStateLedger:
    """State ledger backed by a flat text file.

    The file (and its parent directory) is created on first touch, so a
    missing ledger reads as empty instead of failing.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def has_completed(self, key: str) -> bool:
        return key.strip() in self.completed()

    def completed(self) -> set[str]:
        """All keys recorded so far."""
        return set(self._read_lines())

    def mark_completed(self, key: str) -> None:
        """Record ``key`` unless it is already present.

        Check-then-append: a concurrent external edit between the two
        steps could still duplicate a line, which is acceptable for a
        single interactive operator.
        """
        key = key.strip()
        if not key or "\n" in key:
            raise LedgerError(f"Invalid ledger key: {key!r}")

        if key in self.completed():
            logger.debug("Ledger already contains %s", key)
            return

        try:
            with self._path.open("ab+") as f:
                # Never glue a key onto a hand-edited last line
                prefix = b""
                if f.seek(0, os.SEEK_END) > 0:
                    f.seek(-1, os.SEEK_END)
                    if f.read(1) != b"\n":
                        prefix = b"\n"
                f.write(prefix + key.encode("utf-8") + b"\n")
        except OSError as e:
            raise LedgerError(f"Cannot append to state ledger {self._path}: {e}") from e

        logger.debug("Ledger recorded %s", key)

    # ── Helpers ─────────────────────────────────────────────────

    def _ensure_file(self) -> None:
        if self._path.is_file():
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.touch(mode=DEFAULT_LEDGER_MODE, exist_ok=True)
        except OSError as e:
            raise LedgerError(f"Cannot create state ledger {self._path}: {e}") from e
        logger.info("Created empty state ledger at %s", self._path)

    def _read_lines(self) -> list[str]:
        self._ensure_file()
        try:
            content = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LedgerError(f"Cannot read state ledger {self._path}: {e}") from e
        return [line.strip() for line in content.splitlines() if line.strip()]


class MemoryStateLedger:
    """In-memory ledger for tests.

    ``entries`` keeps insertion order and duplicates so tests can assert
    that nothing was appended twice.
    """

    def __init__(self, initial: list[str] | None = None):
        self.entries: list[str] = list(initial or [])

    def has_completed(self, key: str) -> bool:
        return key in self.entries

    def completed(self) -> set[str]:
        return set(self.entries)

    def mark_completed(self, key: str) -> None:
        if key not in self.entries:
            self.entries.append(key)
