"""
Tests for the configuration loader: parsing, required variables, paths.
"""

import textwrap
from pathlib import Path

import pytest

from provisioner.core.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    ConfigError,
    load_config,
    parse_config_text,
    resolve_config_path,
)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.conf"
    path.write_text(textwrap.dedent(content))
    return path


class TestParseConfigText:
    def test_plain_and_quoted(self):
        values = parse_config_text(
            'A=plain\nB="double quoted"\nC=\'single quoted\'\n'
        )
        assert values == {"A": "plain", "B": "double quoted", "C": "single quoted"}

    def test_export_prefix(self):
        assert parse_config_text("export GIT_BRANCH=develop") == {"GIT_BRANCH": "develop"}

    def test_comments_and_blank_lines(self):
        values = parse_config_text("# header\n\nA=1 # trailing\nB=\"x # not a comment\"\n")
        assert values == {"A": "1", "B": "x # not a comment"}

    def test_lines_without_assignment_ignored(self):
        assert parse_config_text("just some words\nA=1") == {"A": "1"}

    def test_empty_value(self):
        assert parse_config_text("MODULE_SUBDIR=") == {"MODULE_SUBDIR": ""}


class TestResolveConfigPath:
    def test_explicit_wins(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, "/from/env")
        assert resolve_config_path(tmp_path / "c.conf") == tmp_path / "c.conf"

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, "/from/env.conf")
        assert resolve_config_path() == Path("/from/env.conf")

    def test_default(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert resolve_config_path() == Path(DEFAULT_CONFIG_FILE)


class TestLoadConfig:
    def test_loads_required_and_optional(self, tmp_path: Path):
        path = _write(tmp_path, """\
            GIT_REPO_URL="https://example.invalid/m.git"
            MODULE_REPO_DIR=/opt/provisioner-modules
            GIT_BRANCH=stable
            CATEGORIES="install setup"
            UNIT_SHELL=sh
            GIT_TIMEOUT=60
        """)
        config = load_config(path)
        assert config.git_repo_url == "https://example.invalid/m.git"
        assert config.module_repo_dir == Path("/opt/provisioner-modules")
        assert config.git_branch == "stable"
        assert config.categories == ("install", "setup")
        assert config.unit_shell == "sh"
        assert config.git_timeout == 60
        assert config.source == path

    def test_missing_file_names_path(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found") as exc:
            load_config(tmp_path / "nope.conf")
        assert "nope.conf" in str(exc.value)

    def test_missing_repo_dir_named(self, tmp_path: Path):
        path = _write(tmp_path, 'GIT_REPO_URL="https://example.invalid/m.git"\n')
        with pytest.raises(ConfigError) as exc:
            load_config(path)
        message = str(exc.value)
        assert "MODULE_REPO_DIR" in message
        assert "GIT_REPO_URL" not in message

    def test_both_missing_named(self, tmp_path: Path):
        path = _write(tmp_path, "GIT_BRANCH=main\n")
        with pytest.raises(ConfigError) as exc:
            load_config(path)
        assert "GIT_REPO_URL and MODULE_REPO_DIR are not defined" in str(exc.value)

    def test_blank_required_value_counts_as_missing(self, tmp_path: Path):
        path = _write(tmp_path, 'GIT_REPO_URL=""\nMODULE_REPO_DIR=/opt/m\n')
        with pytest.raises(ConfigError, match="GIT_REPO_URL"):
            load_config(path)

    def test_empty_optional_uses_default(self, tmp_path: Path):
        path = _write(tmp_path, "GIT_REPO_URL=u\nMODULE_REPO_DIR=/opt/m\nGIT_BRANCH=\n")
        assert load_config(path).git_branch == "main"

    def test_empty_subdir_is_meaningful(self, tmp_path: Path):
        path = _write(tmp_path, "GIT_REPO_URL=u\nMODULE_REPO_DIR=/opt/m\nMODULE_SUBDIR=\n")
        assert load_config(path).catalog_root == Path("/opt/m")

    def test_invalid_value_becomes_config_error(self, tmp_path: Path):
        path = _write(tmp_path, "GIT_REPO_URL=u\nMODULE_REPO_DIR=/opt/m\nGIT_TIMEOUT=soon\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_unknown_keys_ignored(self, tmp_path: Path):
        path = _write(tmp_path, "GIT_REPO_URL=u\nMODULE_REPO_DIR=/opt/m\nFAVOURITE_COLOR=blue\n")
        assert load_config(path).git_repo_url == "u"

    def test_env_var_location(self, tmp_path: Path, monkeypatch):
        path = _write(tmp_path, "GIT_REPO_URL=u\nMODULE_REPO_DIR=/opt/m\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().source == path
