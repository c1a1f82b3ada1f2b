"""
Unit model: a single provisioning action in the catalog.

A unit is identified by ``category/unit_id``: the name of the directory
holding it and the file stem of its payload. Unit IDs only need to be
unique inside their category.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

# Shown when a unit has no usable metadata record
PLACEHOLDER_DESCRIPTION = "No description available."


def make_key(category: str, unit_id: str) -> str:
    """Build the composite key recorded in the state ledger."""
    return f"{category}/{unit_id}"


def split_key(key: str) -> tuple[str, str]:
    """Split ``category/unit_id`` into its parts.

    Raises:
        ValueError: If the key does not have exactly one separator
            with non-empty parts on both sides.
    """
    category, sep, unit_id = key.strip().partition("/")
    if not sep or not category or not unit_id or "/" in unit_id:
        raise ValueError(f"Expected 'category/unit_id', got {key!r}")
    return category, unit_id


class Unit(BaseModel):
    """A discovered unit of work.

    The payload at ``path`` is opaque to the orchestrator; it is only
    ever handed to the child-process adapter.
    """

    model_config = ConfigDict(frozen=True)

    category: str
    unit_id: str
    path: Path
    description: str = PLACEHOLDER_DESCRIPTION

    @property
    def key(self) -> str:
        """Composite identity used everywhere state is recorded."""
        return make_key(self.category, self.unit_id)
