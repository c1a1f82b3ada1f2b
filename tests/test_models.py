"""
Tests for core models: Unit, Receipt, RunConfig, SyncReport.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from provisioner.core.models import (
    PLACEHOLDER_DESCRIPTION,
    Receipt,
    RunConfig,
    SyncOutcome,
    SyncReport,
    Unit,
    make_key,
    split_key,
)

# ── Unit ────────────────────────────────────────────────────────────


class TestUnit:
    def test_key_is_category_slash_id(self):
        unit = Unit(category="install", unit_id="docker", path=Path("/c/install/docker.sh"))
        assert unit.key == "install/docker"

    def test_default_description_is_placeholder(self):
        unit = Unit(category="install", unit_id="docker", path=Path("/x"))
        assert unit.description == PLACEHOLDER_DESCRIPTION

    def test_frozen(self):
        unit = Unit(category="install", unit_id="docker", path=Path("/x"))
        with pytest.raises(ValidationError):
            unit.unit_id = "nginx"

    def test_same_id_in_two_categories_differs(self):
        a = Unit(category="install", unit_id="nginx", path=Path("/a"))
        b = Unit(category="setup", unit_id="nginx", path=Path("/b"))
        assert a.key != b.key


class TestKeys:
    def test_make_and_split(self):
        assert split_key(make_key("setup", "firewall-basic")) == ("setup", "firewall-basic")

    @pytest.mark.parametrize("bad", ["", "install", "/docker", "install/", "a/b/c"])
    def test_split_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            split_key(bad)


# ── Receipt ─────────────────────────────────────────────────────────


class TestReceipt:
    def test_success(self):
        r = Receipt.success(operation="git:pull", output="Already up to date.")
        assert r.ok and not r.failed and not r.skipped
        assert r.output == "Already up to date."

    def test_failure(self):
        r = Receipt.failure(operation="unit:install/docker", error="exit 1", return_code=1)
        assert r.failed
        assert r.return_code == 1
        assert r.error == "exit 1"

    def test_skip_keeps_reason(self):
        r = Receipt.skip(operation="unit:install/docker", reason="already completed")
        assert r.skipped
        assert r.output == "already completed"

    def test_timestamps_filled(self):
        r = Receipt.success(operation="x")
        assert r.started_at and r.ended_at


# ── RunConfig ───────────────────────────────────────────────────────


class TestRunConfig:
    def test_defaults(self):
        config = RunConfig(git_repo_url="https://example.invalid/m.git", module_repo_dir=Path("/opt/m"))
        assert config.git_branch == "main"
        assert config.categories == ("install", "setup", "tools")
        assert config.state_file == Path("/var/lib/provisioner/state")
        assert config.log_file == Path("/var/log/provisioner.log")
        assert config.unit_shell == "bash"
        assert config.catalog_root == Path("/opt/m/modules")

    def test_empty_subdir_puts_categories_in_repo(self):
        config = RunConfig(git_repo_url="u", module_repo_dir=Path("/opt/m"), module_subdir="")
        assert config.catalog_root == Path("/opt/m")

    def test_subdir_slashes_stripped(self):
        config = RunConfig(git_repo_url="u", module_repo_dir=Path("/opt/m"), module_subdir="/scripts/")
        assert config.catalog_root == Path("/opt/m/scripts")

    def test_categories_from_string(self):
        config = RunConfig(git_repo_url="u", module_repo_dir=Path("/m"), categories="install, hardening tools")
        assert config.categories == ("install", "hardening", "tools")

    def test_empty_url_rejected(self):
        with pytest.raises(ValidationError):
            RunConfig(git_repo_url="", module_repo_dir=Path("/m"))

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            RunConfig(git_repo_url="u", module_repo_dir=Path("/m"), git_timeout=0)

    def test_is_cloned(self, tmp_path: Path):
        config = RunConfig(git_repo_url="u", module_repo_dir=tmp_path / "repo")
        assert not config.is_cloned
        (tmp_path / "repo" / ".git").mkdir(parents=True)
        assert config.is_cloned


# ── SyncReport ──────────────────────────────────────────────────────


class TestSyncReport:
    @pytest.mark.parametrize(
        "outcome, ok",
        [
            (SyncOutcome.CLONED, True),
            (SyncOutcome.UPDATED, True),
            (SyncOutcome.FORCED, True),
            (SyncOutcome.WARNING, False),
        ],
    )
    def test_ok(self, outcome, ok):
        assert SyncReport(outcome=outcome).ok is ok

    def test_step_names(self):
        report = SyncReport(
            outcome=SyncOutcome.UPDATED,
            steps=[Receipt.success(operation="git:status"), Receipt.success(operation="git:pull")],
        )
        assert report.step_names() == ["git:status", "git:pull"]

    def test_json_dump(self):
        data = SyncReport(outcome=SyncOutcome.FORCED, message="m").model_dump(mode="json")
        assert data["outcome"] == "forced"
