"""Catalog store: discovery of units on disk."""

from provisioner.core.catalog.store import (
    CatalogStore,
    FileCatalogStore,
    MemoryCatalogStore,
    make_units_executable,
)

__all__ = [
    "CatalogStore",
    "FileCatalogStore",
    "MemoryCatalogStore",
    "make_units_executable",
]
