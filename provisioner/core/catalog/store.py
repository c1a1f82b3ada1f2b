"""
Catalog store: discovers units in a categorized directory tree.

Layout (catalog root = ``MODULE_REPO_DIR/MODULE_SUBDIR``):

    <catalog root>/
        install/
            docker.sh
            docker.meta       ← optional, "description: ..." line
            nginx.sh
        setup/
            firewall-basic.sh

Units are discovered fresh on every call; nothing is cached.
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import Protocol

from provisioner.core.errors import CategoryUnavailable
from provisioner.core.models.unit import PLACEHOLDER_DESCRIPTION, Unit

logger = logging.getLogger(__name__)

DESCRIPTION_LABEL = "description:"

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class CatalogStore(Protocol):
    """Repository of units, grouped by category."""

    def category_path(self, category: str) -> Path:
        ...

    def list_units(self, category: str) -> list[Unit]:
        """Units directly inside ``category``, sorted by unit_id.

        Raises:
            CategoryUnavailable: If the category does not exist.
        """
        ...


def read_description(meta_path: Path) -> str:
    """Return the ``description:`` value from a metadata record.

    Never raises: a missing, unreadable or malformed record yields
    the placeholder.
    """
    try:
        content = meta_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return PLACEHOLDER_DESCRIPTION
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Unreadable metadata %s: %s", meta_path, e)
        return PLACEHOLDER_DESCRIPTION

    for line in content.splitlines():
        if DESCRIPTION_LABEL not in line:
            continue
        value = " ".join(line.split(DESCRIPTION_LABEL, 1)[1].split())
        if value:
            return value
    return PLACEHOLDER_DESCRIPTION


class FileCatalogStore:
    """Catalog store backed by a directory tree."""

    def __init__(self, root: Path, unit_suffix: str = ".sh", meta_suffix: str = ".meta"):
        self._root = root
        self._unit_suffix = unit_suffix
        self._meta_suffix = meta_suffix

    @property
    def root(self) -> Path:
        return self._root

    def category_path(self, category: str) -> Path:
        return self._root / category

    def list_units(self, category: str) -> list[Unit]:
        directory = self.category_path(category)
        if not directory.is_dir():
            raise CategoryUnavailable(category, directory)

        units = []
        for path in directory.iterdir():
            if path.suffix != self._unit_suffix or not path.is_file():
                continue
            units.append(
                Unit(
                    category=category,
                    unit_id=path.stem,
                    path=path,
                    description=read_description(path.with_suffix(self._meta_suffix)),
                )
            )

        units.sort(key=lambda u: u.unit_id)
        logger.debug("Found %d units in %s", len(units), directory)
        return units


class MemoryCatalogStore:
    """In-memory catalog for tests.

    ``catalog`` maps category → {unit_id: description or None}. Categories
    absent from the mapping behave like missing directories.
    """

    def __init__(
        self,
        catalog: dict[str, dict[str, str | None]] | None = None,
        root: Path = Path("/catalog"),
    ):
        self._catalog = catalog or {}
        self._root = root

    def category_path(self, category: str) -> Path:
        return self._root / category

    def list_units(self, category: str) -> list[Unit]:
        if category not in self._catalog:
            raise CategoryUnavailable(category, self.category_path(category))
        return [
            Unit(
                category=category,
                unit_id=unit_id,
                path=self.category_path(category) / f"{unit_id}.sh",
                description=description or PLACEHOLDER_DESCRIPTION,
            )
            for unit_id, description in sorted(self._catalog[category].items())
        ]


def make_units_executable(root: Path, unit_suffix: str = ".sh") -> int:
    """Recursively add execute bits to every unit payload under ``root``.

    A unit that cannot be invoked would otherwise look present in the
    menu and fail only when run.

    Returns:
        Number of files whose mode was changed.
    """
    if not root.is_dir():
        return 0

    changed = 0
    for path in root.rglob(f"*{unit_suffix}"):
        if ".git" in path.relative_to(root).parts or not path.is_file():
            continue
        mode = path.stat().st_mode
        if mode & _EXEC_BITS == _EXEC_BITS:
            continue
        path.chmod(mode | _EXEC_BITS)
        changed += 1

    logger.debug("Marked %d unit payloads executable under %s", changed, root)
    return changed
