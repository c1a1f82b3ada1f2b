"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from provisioner.ui.presenter import ScriptedPresenter


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """setup_logging() replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture(autouse=True)
def fallback_log(tmp_path: Path, monkeypatch) -> Path:
    """Keep startup refusals out of /var/log."""
    from provisioner.core.use_cases import startup

    path = tmp_path / "fallback" / "provisioner.log"
    monkeypatch.setattr(startup, "FALLBACK_LOG_FILE", path)
    return path


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """A working copy that looks already cloned, with a small catalog.

    modules/install: broken (exit 3), docker (with .meta), nginx (no .meta)
    modules/setup:   firewall
    modules/tools:   missing on purpose
    """
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)

    install = repo / "modules" / "install"
    install.mkdir(parents=True)
    (install / "docker.sh").write_text("#!/usr/bin/env bash\necho 'installing docker'\n")
    (install / "docker.meta").write_text("description: Install Docker Engine\n")
    (install / "nginx.sh").write_text("#!/usr/bin/env bash\necho 'installing nginx'\n")
    (install / "broken.sh").write_text("#!/usr/bin/env bash\necho 'about to fail'\nexit 3\n")

    setup = repo / "modules" / "setup"
    setup.mkdir(parents=True)
    (setup / "firewall.sh").write_text("#!/usr/bin/env bash\necho 'firewall up'\n")
    (setup / "firewall.meta").write_text("author: ops\ndescription:   Basic   UFW rules\n")
    return repo


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    return tmp_path / "var" / "lib" / "provisioner" / "state"


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    return tmp_path / "var" / "log" / "provisioner.log"


@pytest.fixture
def config_file(tmp_path: Path, repo_dir: Path, state_file: Path, log_file: Path) -> Path:
    """Config file pointing every path into tmp_path."""
    content = textwrap.dedent(f"""\
        # Provisioner configuration
        GIT_REPO_URL="https://example.invalid/acme/server-modules.git"
        MODULE_REPO_DIR="{repo_dir}"
        STATE_FILE={state_file}
        LOG_FILE={log_file}
    """)
    path = tmp_path / "config.conf"
    path.write_text(content)
    return path


@pytest.fixture
def presenter() -> ScriptedPresenter:
    return ScriptedPresenter()
