"""
Shell command adapter: run a child process and capture its outcome.

Unit payloads and git commands go through here. Output either lands
in a caller-supplied stream (the execution log) or is captured into
the receipt.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO

from provisioner.adapters.base import Adapter
from provisioner.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in argv)


class ShellCommandAdapter(Adapter):
    """Execute commands as isolated child processes.

    stdin is never connected: the terminal belongs to the menu.
    """

    def __init__(self, shell: str = "bash"):
        self._shell = shell

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which(self._shell) is not None

    def run_script(
        self,
        script: Path,
        *,
        operation: str,
        output: IO[bytes] | None = None,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> Receipt:
        """Run ``script`` with the configured shell in ``cwd``.

        The script's own directory is never the default: it lives in the
        catalog working copy.
        """
        return self.run(
            [self._shell, str(script)],
            operation=operation,
            cwd=cwd,
            output=output,
            env=env,
        )

    def run(
        self,
        argv: Sequence[str],
        *,
        operation: str,
        cwd: Path | None = None,
        output: IO[bytes] | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Receipt:
        """Run ``argv`` and return a receipt.

        Args:
            argv: Command and arguments.
            operation: Name recorded on the receipt.
            cwd: Working directory.
            output: If given, stdout and stderr are appended to it
                instead of being captured.
            env: Full environment for the child (default: inherit).
            timeout: Seconds before the child is killed. None waits forever.
        """
        argv_list = [str(a) for a in argv]
        command = format_argv(argv_list)
        logger.debug("Executing: %s (cwd=%s)", command, cwd)
        start = time.monotonic()

        try:
            if output is not None:
                result = subprocess.run(
                    argv_list,
                    cwd=cwd,
                    stdin=subprocess.DEVNULL,
                    stdout=output,
                    stderr=subprocess.STDOUT,
                    env=env,
                    timeout=timeout,
                )
                stdout, stderr = "", ""
            else:
                result = subprocess.run(
                    argv_list,
                    cwd=cwd,
                    stdin=subprocess.DEVNULL,
                    capture_output=True,
                    text=True,
                    env=env,
                    timeout=timeout,
                )
                stdout, stderr = result.stdout.strip(), result.stderr.strip()
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                operation=operation,
                error=f"Command timed out after {timeout}s",
                metadata={"command": command, "timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(
                operation=operation,
                error=f"Command execution error: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if result.returncode == 0:
            return Receipt.success(
                operation=operation,
                output=stdout,
                return_code=0,
                duration_ms=elapsed_ms,
                metadata={"command": command, "stderr": stderr},
            )
        return Receipt.failure(
            operation=operation,
            error=stderr or f"Command exited with code {result.returncode}",
            output=stdout,
            return_code=result.returncode,
            duration_ms=elapsed_ms,
            metadata={"command": command},
        )
