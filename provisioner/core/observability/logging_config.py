"""
Logging configuration: central setup for all entrypoints.

Called once at startup by ``main.py``. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Two sinks:
    console (stderr)  level from CLI flag > PROVISIONER_LOG_LEVEL > WARNING
    execution log     always INFO and up, ``timestamp [LEVEL] - message``
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

# WARNING level: minimal, the menus carry the user-facing messages
_FMT_MINIMAL = "%(message)s"

# INFO level: timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# Execution log: the format operators grep for
_FMT_FILE = "%(asctime)s [%(levelname)s] - %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "WARNING",
    log_file: Path | str | None = None,
    log_file_level: str = "INFO",
    console: bool = True,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console log level name (DEBUG, INFO, WARNING, ...).
        log_file: Execution log path. Created (with its directory) if needed.
        log_file_level: Level for the execution log.
        console: Whether to attach the stderr handler. The interactive
            menu turns it off so log lines don't tear through whiptail.
    """
    numeric_level = _parse_level(level)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    effective_level = logging.CRITICAL

    # ── Console handler (stderr) ────────────────────────────────
    if console:
        if numeric_level <= logging.DEBUG:
            fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
        elif numeric_level <= logging.INFO:
            fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
        else:
            fmt, datefmt = _FMT_MINIMAL, None

        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(numeric_level)
        stream.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        root.addHandler(stream)
        effective_level = numeric_level

    # ── Execution log ───────────────────────────────────────────
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_level = _parse_level(log_file_level)
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(path, mode="a", encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
