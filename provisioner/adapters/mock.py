"""
Mock adapters: test doubles for the shell and git adapters.

Used to exercise the runner and synchronizer without touching real
processes or the network. Both succeed by default and can be told to
fail specific operations.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import IO, Callable

from provisioner.adapters.base import Adapter
from provisioner.core.models.receipt import Receipt


class MockShellAdapter(Adapter):
    """Records scripts instead of running them.

    Exit codes are configured per script stem (``set_exit_code('nginx', 1)``).
    """

    def __init__(self, available: bool = True, default_output: bytes = b"[mock] executed\n"):
        self._available = available
        self._default_output = default_output
        self._exit_codes: dict[str, int] = {}
        self._call_log: list[Path] = []
        self.last_cwd: Path | None = None

    @property
    def name(self) -> str:
        return "shell"

    @property
    def call_log(self) -> list[Path]:
        """Every script this mock was asked to run."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_exit_code(self, stem: str, code: int) -> None:
        self._exit_codes[stem] = code

    def run_script(
        self,
        script: Path,
        *,
        operation: str,
        output: IO[bytes] | None = None,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> Receipt:
        self._call_log.append(script)
        self.last_cwd = cwd
        code = self._exit_codes.get(script.stem, 0)
        if output is not None:
            output.write(self._default_output)
        if code == 0:
            return Receipt.success(operation=operation, return_code=0, metadata={"mock": True})
        return Receipt.failure(
            operation=operation,
            error=f"Command exited with code {code}",
            return_code=code,
            metadata={"mock": True},
        )


class MockGitAdapter(Adapter):
    """Scripted git client.

    ``clone`` creates ``<dest>/.git`` and calls ``on_clone(dest)`` so a test
    can lay out catalog files. ``stash`` clears the dirty flag and refuses while
    ``unmerged`` is set, as the real command would. ``abort_merge`` clears
    ``unmerged``.
    """

    def __init__(
        self,
        dirty: bool = False,
        available: bool = True,
        on_clone: Callable[[Path], None] | None = None,
        unmerged: bool = False,
    ):
        self.dirty = dirty
        self.unmerged = unmerged
        self._available = available
        self._on_clone = on_clone
        self._failures: dict[str, str] = {}
        self._call_log: list[str] = []

    @property
    def name(self) -> str:
        return "git"

    @property
    def call_log(self) -> list[str]:
        """Operation names in call order, e.g. ``['status', 'pull']``."""
        return self._call_log

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, operation: str, error: str = "Mock failure") -> None:
        """Make ``operation`` ('clone', 'pull', 'fetch', 'stash', 'reset', 'status', 'abort') fail."""
        self._failures[operation] = error

    def clear_failure(self, operation: str) -> None:
        self._failures.pop(operation, None)

    def clone(self, url: str, dest: Path) -> Receipt:
        receipt = self._record("clone", "git:clone")
        if receipt.ok:
            (dest / ".git").mkdir(parents=True, exist_ok=True)
            if self._on_clone:
                self._on_clone(dest)
        return receipt

    def status(self, repo: Path) -> Receipt:
        receipt = self._record("status", "git:status")
        if receipt.ok:
            receipt.metadata["dirty"] = self.dirty or self.unmerged
            receipt.metadata["unmerged"] = self.unmerged
        return receipt

    def abort_merge(self, repo: Path) -> Receipt:
        receipt = self._record("abort", "git:reset --merge")
        if receipt.ok:
            self.unmerged = False
        return receipt

    def stash(self, repo: Path, message: str) -> Receipt:
        receipt = self._record("stash", "git:stash")
        if receipt.ok and self.unmerged:
            return Receipt.failure(operation="git:stash", error="needs merge")
        if receipt.ok:
            self.dirty = False
        return receipt

    def reset_hard(self, repo: Path, ref: str = "HEAD") -> Receipt:
        return self._record("reset", f"git:reset {ref}")

    def pull(self, repo: Path, remote: str = "origin", branch: str = "main") -> Receipt:
        return self._record("pull", "git:pull")

    def fetch(self, repo: Path, remote: str = "origin") -> Receipt:
        return self._record("fetch", "git:fetch")

    def _record(self, key: str, operation: str) -> Receipt:
        self._call_log.append(key)
        if key in self._failures:
            return Receipt.failure(operation=operation, error=self._failures[key])
        return Receipt.success(operation=operation, metadata={"mock": True})
