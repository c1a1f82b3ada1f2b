"""
Adapter base: the contract between the core and external tools.

The core only talks to ``git``, ``bash`` and friends through adapters.
Adapters perform the side effect and return a Receipt. They NEVER raise
for a failed command; the failure is captured in the receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Adapter(ABC):
    """Abstract base class for all adapters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'git')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is installed.

        Should be fast and never raise.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
