"""
Tests for the catalog store: discovery, descriptions, executable bits.
"""

import os
import stat
from pathlib import Path

import pytest

from provisioner.core.catalog import (
    FileCatalogStore,
    MemoryCatalogStore,
    make_units_executable,
)
from provisioner.core.catalog.store import read_description
from provisioner.core.errors import CategoryUnavailable
from provisioner.core.models import PLACEHOLDER_DESCRIPTION


class TestReadDescription:
    def test_description_line(self, tmp_path: Path):
        meta = tmp_path / "docker.meta"
        meta.write_text("description: Install Docker Engine\n")
        assert read_description(meta) == "Install Docker Engine"

    def test_whitespace_collapsed(self, tmp_path: Path):
        meta = tmp_path / "x.meta"
        meta.write_text("author: ops\ndescription:    spread    out  \n")
        assert read_description(meta) == "spread out"

    def test_missing_file(self, tmp_path: Path):
        assert read_description(tmp_path / "absent.meta") == PLACEHOLDER_DESCRIPTION

    def test_no_description_line(self, tmp_path: Path):
        meta = tmp_path / "x.meta"
        meta.write_text("author: ops\n")
        assert read_description(meta) == PLACEHOLDER_DESCRIPTION

    def test_empty_description(self, tmp_path: Path):
        meta = tmp_path / "x.meta"
        meta.write_text("description:\n")
        assert read_description(meta) == PLACEHOLDER_DESCRIPTION

    def test_binary_garbage(self, tmp_path: Path):
        meta = tmp_path / "x.meta"
        meta.write_bytes(b"\xff\xfe\x00description")
        assert read_description(meta) == PLACEHOLDER_DESCRIPTION


class TestFileCatalogStore:
    def test_lists_sorted_units(self, repo_dir: Path):
        store = FileCatalogStore(repo_dir / "modules")
        units = store.list_units("install")
        assert [u.unit_id for u in units] == ["broken", "docker", "nginx"]
        assert all(u.category == "install" for u in units)

    def test_descriptions(self, repo_dir: Path):
        store = FileCatalogStore(repo_dir / "modules")
        by_id = {u.unit_id: u for u in store.list_units("install")}
        assert by_id["docker"].description == "Install Docker Engine"
        assert by_id["nginx"].description == PLACEHOLDER_DESCRIPTION

    def test_paths_point_at_payloads(self, repo_dir: Path):
        store = FileCatalogStore(repo_dir / "modules")
        (unit,) = store.list_units("setup")
        assert unit.path == repo_dir / "modules" / "setup" / "firewall.sh"
        assert unit.description == "Basic UFW rules"

    def test_missing_category(self, repo_dir: Path):
        store = FileCatalogStore(repo_dir / "modules")
        with pytest.raises(CategoryUnavailable) as exc:
            store.list_units("tools")
        assert exc.value.category == "tools"
        assert exc.value.path == repo_dir / "modules" / "tools"

    def test_empty_category(self, repo_dir: Path):
        (repo_dir / "modules" / "tools").mkdir()
        assert FileCatalogStore(repo_dir / "modules").list_units("tools") == []

    def test_no_recursion_and_suffix_filter(self, repo_dir: Path):
        install = repo_dir / "modules" / "install"
        (install / "nested").mkdir()
        (install / "nested" / "deep.sh").write_text("echo deep\n")
        (install / "README.md").write_text("docs\n")
        (install / "dir.sh").mkdir()
        ids = [u.unit_id for u in FileCatalogStore(repo_dir / "modules").list_units("install")]
        assert ids == ["broken", "docker", "nginx"]

    def test_discovers_fresh_each_call(self, repo_dir: Path):
        store = FileCatalogStore(repo_dir / "modules")
        assert len(store.list_units("setup")) == 1
        (repo_dir / "modules" / "setup" / "ssh-hardening.sh").write_text("echo hi\n")
        assert len(store.list_units("setup")) == 2

    def test_same_id_in_two_categories(self, repo_dir: Path):
        (repo_dir / "modules" / "setup" / "nginx.sh").write_text("echo conf\n")
        store = FileCatalogStore(repo_dir / "modules")
        keys = {u.key for u in store.list_units("install") + store.list_units("setup")}
        assert {"install/nginx", "setup/nginx"} <= keys


class TestMemoryCatalogStore:
    def test_lists_units(self):
        store = MemoryCatalogStore({"install": {"nginx": None, "docker": "Docker"}})
        units = store.list_units("install")
        assert [u.unit_id for u in units] == ["docker", "nginx"]
        assert units[0].description == "Docker"
        assert units[1].description == PLACEHOLDER_DESCRIPTION

    def test_missing_category(self):
        with pytest.raises(CategoryUnavailable):
            MemoryCatalogStore().list_units("install")


class TestMakeUnitsExecutable:
    def test_sets_exec_bits(self, repo_dir: Path):
        changed = make_units_executable(repo_dir)
        assert changed == 4
        docker = repo_dir / "modules" / "install" / "docker.sh"
        assert os.access(docker, os.X_OK)
        assert docker.stat().st_mode & stat.S_IXOTH

    def test_leaves_other_files(self, repo_dir: Path):
        make_units_executable(repo_dir)
        meta = repo_dir / "modules" / "install" / "docker.meta"
        assert not meta.stat().st_mode & stat.S_IXUSR

    def test_idempotent(self, repo_dir: Path):
        make_units_executable(repo_dir)
        assert make_units_executable(repo_dir) == 0

    def test_skips_git_dir(self, repo_dir: Path):
        hook = repo_dir / ".git" / "hooks" / "sample.sh"
        hook.parent.mkdir(parents=True)
        hook.write_text("echo hook\n")
        make_units_executable(repo_dir)
        assert not hook.stat().st_mode & stat.S_IXUSR

    def test_missing_root(self, tmp_path: Path):
        assert make_units_executable(tmp_path / "absent") == 0
