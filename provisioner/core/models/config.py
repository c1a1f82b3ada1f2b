"""
Run configuration model: process-wide settings, loaded once at startup.

The model is frozen. Components receive it explicitly instead of
reading ambient globals.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_STATE_FILE = "/var/lib/provisioner/state"
DEFAULT_LOG_FILE = "/var/log/provisioner.log"
DEFAULT_CATEGORIES = ("install", "setup", "tools")

# Config-file key → model field
CONFIG_KEYS = {
    "GIT_REPO_URL": "git_repo_url",
    "MODULE_REPO_DIR": "module_repo_dir",
    "GIT_BRANCH": "git_branch",
    "MODULE_SUBDIR": "module_subdir",
    "CATEGORIES": "categories",
    "STATE_FILE": "state_file",
    "LOG_FILE": "log_file",
    "UNIT_SHELL": "unit_shell",
    "GIT_TIMEOUT": "git_timeout",
}

REQUIRED_KEYS = ("GIT_REPO_URL", "MODULE_REPO_DIR")


class RunConfig(BaseModel):
    """Validated run configuration.

    ``module_repo_dir`` is the git working copy. Categories live in
    ``module_repo_dir / module_subdir``; an empty ``module_subdir``
    puts them directly in the working copy.
    """

    model_config = ConfigDict(frozen=True)

    # ── Required ─────────────────────────────────────────────────
    git_repo_url: str = Field(min_length=1)
    module_repo_dir: Path

    # ── Catalog layout ───────────────────────────────────────────
    git_branch: str = "main"
    module_subdir: str = "modules"
    categories: tuple[str, ...] = DEFAULT_CATEGORIES
    unit_suffix: str = ".sh"
    meta_suffix: str = ".meta"

    # ── Local files ──────────────────────────────────────────────
    state_file: Path = Path(DEFAULT_STATE_FILE)
    log_file: Path = Path(DEFAULT_LOG_FILE)

    # ── Execution ────────────────────────────────────────────────
    unit_shell: str = "bash"
    git_timeout: int = Field(default=300, gt=0)

    # ── Provenance ───────────────────────────────────────────────
    source: Path | None = None

    @field_validator("categories", mode="before")
    @classmethod
    def _split_categories(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(value.replace(",", " ").split())
        return value

    @field_validator("module_subdir")
    @classmethod
    def _strip_subdir(cls, value: str) -> str:
        return value.strip().strip("/")

    @property
    def catalog_root(self) -> Path:
        """Directory whose first-level subdirectories are categories."""
        if self.module_subdir:
            return self.module_repo_dir / self.module_subdir
        return self.module_repo_dir

    @property
    def is_cloned(self) -> bool:
        """Whether the working copy has been cloned already."""
        return (self.module_repo_dir / ".git").is_dir()
