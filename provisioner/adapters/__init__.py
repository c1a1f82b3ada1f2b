"""Adapters: bindings for external tools.

Public re-exports for convenient access.
"""

from provisioner.adapters.base import Adapter
from provisioner.adapters.mock import MockGitAdapter, MockShellAdapter
from provisioner.adapters.shell.command import ShellCommandAdapter
from provisioner.adapters.vcs.git import GitAdapter

__all__ = [
    "Adapter",
    "GitAdapter",
    "MockGitAdapter",
    "MockShellAdapter",
    "ShellCommandAdapter",
]
