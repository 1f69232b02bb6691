"""Tests for mediatracker.core.config module.

Covers:
  - get_global_config_path() with default and XDG_CONFIG_HOME
  - load_global_config() with missing, valid, and invalid files
  - find_tracker_root() resolution (env var > local walk > global config > home)
  - get_paths()
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from mediatracker.core.config import (
    find_tracker_root,
    get_global_config_path,
    get_paths,
    load_global_config,
)


def _write_global_config(tmp_path: Path, monkeypatch, data) -> None:
    config_dir = tmp_path / "xdg" / "mediatracker"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text(yaml.dump(data), encoding="utf-8")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


class TestGetGlobalConfigPath:
    """Tests for get_global_config_path()."""

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        expected = Path.home() / ".config" / "mediatracker" / "config.yaml"
        assert get_global_config_path() == expected

    def test_respects_xdg_config_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_global_config_path() == tmp_path / "mediatracker" / "config.yaml"


class TestLoadGlobalConfig:
    """Tests for load_global_config()."""

    def test_missing_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert load_global_config() == {}

    def test_valid_file(self, monkeypatch, tmp_path):
        _write_global_config(tmp_path, monkeypatch, {"data_dir": "/somewhere"})
        assert load_global_config() == {"data_dir": "/somewhere"}

    def test_invalid_yaml(self, monkeypatch, tmp_path):
        config_dir = tmp_path / "mediatracker"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("data_dir: [unclosed", encoding="utf-8")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert load_global_config() == {}

    def test_non_mapping(self, monkeypatch, tmp_path):
        _write_global_config(tmp_path, monkeypatch, ["a", "list"])
        assert load_global_config() == {}


class TestFindTrackerRoot:
    """Tests for find_tracker_root() resolution order."""

    def _make_root(self, base: Path) -> Path:
        (base / ".mediatracker").mkdir(parents=True)
        return base

    def test_env_var_takes_priority(self, monkeypatch, tmp_path):
        root = self._make_root(tmp_path / "env_root")
        monkeypatch.setenv("MEDIATRACKER_HOME", str(root))
        assert find_tracker_root(start_path=tmp_path / "nowhere") == root.resolve()

    def test_env_var_without_data_dir_raises(self, monkeypatch, tmp_path):
        bad_dir = tmp_path / "empty"
        bad_dir.mkdir()
        monkeypatch.setenv("MEDIATRACKER_HOME", str(bad_dir))
        with pytest.raises(FileNotFoundError, match="MEDIATRACKER_HOME"):
            find_tracker_root()

    def test_local_walk(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEDIATRACKER_HOME", raising=False)
        root = self._make_root(tmp_path / "collection")
        subdir = root / "exports" / "2024"
        subdir.mkdir(parents=True)
        assert find_tracker_root(start_path=subdir) == root.resolve()

    def test_local_walk_beats_global_config(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEDIATRACKER_HOME", raising=False)
        global_root = self._make_root(tmp_path / "global_root")
        _write_global_config(tmp_path, monkeypatch, {"data_dir": str(global_root)})

        local_root = self._make_root(tmp_path / "local_root")
        assert find_tracker_root(start_path=local_root) == local_root.resolve()

    def test_global_config_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEDIATRACKER_HOME", raising=False)
        start = tmp_path / "plain" / "dir"
        start.mkdir(parents=True)
        global_root = self._make_root(tmp_path / "global_root")
        _write_global_config(tmp_path, monkeypatch, {"data_dir": str(global_root)})

        assert find_tracker_root(start_path=start) == global_root.resolve()

    def test_global_config_bad_path_raises(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEDIATRACKER_HOME", raising=False)
        start = tmp_path / "plain"
        start.mkdir()
        bad_dir = tmp_path / "bad_global"
        bad_dir.mkdir()
        _write_global_config(tmp_path, monkeypatch, {"data_dir": str(bad_dir)})

        with pytest.raises(FileNotFoundError, match="data_dir"):
            find_tracker_root(start_path=start)

    def test_falls_back_to_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEDIATRACKER_HOME", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        start = tmp_path / "plain"
        start.mkdir()

        assert find_tracker_root(start_path=start) == tmp_path / "home"


class TestGetPaths:
    """Tests for get_paths()."""

    def test_explicit_root(self, tmp_path):
        paths = get_paths(tmp_path)
        assert paths.root == tmp_path
        assert paths.data_dir == tmp_path / ".mediatracker"
        assert paths.storage_dir == paths.data_dir
        assert paths.config_file == tmp_path / ".mediatracker" / "config.yaml"
        assert paths.backups == tmp_path / ".mediatracker" / "backups"
        assert paths.exports == tmp_path

    def test_uses_cached_root(self, tracker_home):
        assert get_paths().root == tracker_home
