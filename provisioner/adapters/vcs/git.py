"""
Git adapter: the version-control operations the synchronizer needs.

clone, status, stash, reset, pull, fetch and merge abort, through the git CLI.
Every method returns a Receipt; a failing git command never raises.
Credential prompts are disabled: the operator is in a menu, not a shell.
File-mode changes are ignored, since every sync sets execute bits on
unit payloads and that must not count as a local modification.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from provisioner.adapters.base import Adapter
from provisioner.adapters.shell.command import ShellCommandAdapter
from provisioner.core.models.receipt import Receipt

# Porcelain XY codes of paths with an unresolved conflict.
UNMERGED_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})
_REBASE_DIRS = ("rebase-merge", "rebase-apply")


class GitAdapter(Adapter):
    """Git CLI client.

    Args:
        timeout: Seconds allowed per git command.
        runner: Child-process adapter used to invoke git.
    """

    def __init__(self, timeout: int = 300, runner: ShellCommandAdapter | None = None):
        self._timeout = timeout
        self._runner = runner or ShellCommandAdapter()

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    # ── Operations ──────────────────────────────────────────────

    def clone(self, url: str, dest: Path) -> Receipt:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Receipt.failure(operation="git:clone", error=f"Cannot create {dest.parent}: {e}")
        return self._git(["clone", url, str(dest)], operation="git:clone", cwd=dest.parent)

    def status(self, repo: Path) -> Receipt:
        """Porcelain status.

        Metadata:
            dirty: There are local changes.
            changes: Number of changed paths.
            unmerged: A pull, merge or rebase stopped halfway (conflicted
                paths, or git still holds the operation state).
        """
        receipt = self._git(["status", "--porcelain"], operation="git:status", cwd=repo)
        if receipt.ok:
            changes = [ln for ln in receipt.output.splitlines() if ln.strip()]
            conflicts = [ln for ln in changes if ln[:2] in UNMERGED_CODES]
            receipt.metadata["dirty"] = bool(changes)
            receipt.metadata["changes"] = len(changes)
            receipt.metadata["unmerged"] = bool(conflicts) or self._in_progress(repo)
        return receipt

    def _in_progress(self, repo: Path) -> bool:
        return (repo / ".git" / "MERGE_HEAD").exists() or self._rebasing(repo)

    def _rebasing(self, repo: Path) -> bool:
        return any((repo / ".git" / d).is_dir() for d in _REBASE_DIRS)

    def abort_merge(self, repo: Path) -> Receipt:
        """Drop an unfinished merge or rebase, back to the last commit."""
        if self._rebasing(repo):
            return self._git(["rebase", "--abort"], operation="git:rebase --abort", cwd=repo)
        return self._git(["reset", "--merge"], operation="git:reset --merge", cwd=repo)

    def stash(self, repo: Path, message: str) -> Receipt:
        return self._git(["stash", "push", "-m", message], operation="git:stash", cwd=repo)

    def reset_hard(self, repo: Path, ref: str = "HEAD") -> Receipt:
        return self._git(["reset", "--hard", ref], operation=f"git:reset {ref}", cwd=repo)

    def pull(self, repo: Path, remote: str = "origin", branch: str = "main") -> Receipt:
        # A diverged copy fails here instead of merging.
        return self._git(["pull", "--ff-only", remote, branch], operation="git:pull", cwd=repo)

    def fetch(self, repo: Path, remote: str = "origin") -> Receipt:
        return self._git(["fetch", remote], operation="git:fetch", cwd=repo)

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, args: list[str], *, operation: str, cwd: Path) -> Receipt:
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        return self._runner.run(
            ["git", "-c", "core.fileMode=false", *args],
            operation=operation,
            cwd=cwd,
            env=env,
            timeout=self._timeout,
        )
