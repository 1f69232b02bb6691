"""
Where the collection lives on disk.

Finds the data directory and derives the paths of the stored collection,
tags, backups and per-collection settings from it.

Resolution order for the data root:
  1. MEDIATRACKER_HOME environment variable (highest priority)
  2. Walk up from cwd looking for a .mediatracker/ directory
  3. Global config file (~/.config/mediatracker/config.yaml) data_dir key
  4. ~/.mediatracker (created on demand by the CLI)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

DATA_DIR_NAME = ".mediatracker"


@dataclass(frozen=True)
class TrackerPaths:
    """Standard paths for the collection data."""

    root: Path
    data_dir: Path

    # Stored state (one JSON file per storage key)
    storage_dir: Path
    config_file: Path

    # Backups and exports
    backups: Path
    exports: Path


def get_global_config_path() -> Path:
    """Return the path to the global config file.

    Respects XDG_CONFIG_HOME if set, otherwise defaults to
    ~/.config/mediatracker/config.yaml.
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "mediatracker" / "config.yaml"


def load_global_config() -> dict[str, Any]:
    """Load the global configuration.

    Returns:
        The parsed mapping; {} when the file is absent or unreadable.
    """
    config_path = get_global_config_path()
    if not config_path.is_file():
        return {}
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return data
        return {}
    except (OSError, yaml.YAMLError):
        return {}


def _walk_up_for_data_dir(start_path: Path) -> Path | None:
    current = start_path.resolve()
    while current != current.parent:
        if (current / DATA_DIR_NAME).is_dir():
            return current
        current = current.parent
    return None


def find_tracker_root(start_path: Path | None = None) -> Path:
    """Find the directory that holds the .mediatracker/ data directory.

    Args:
        start_path: Starting path for the directory walk (defaults to cwd)

    Returns:
        Path to the root containing .mediatracker/

    Raises:
        FileNotFoundError: If MEDIATRACKER_HOME or the global data_dir point
            somewhere without a .mediatracker/ directory
    """
    env_root = os.environ.get("MEDIATRACKER_HOME")
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if (env_path / DATA_DIR_NAME).is_dir():
            return env_path
        raise FileNotFoundError(
            f"MEDIATRACKER_HOME={env_root} does not contain a {DATA_DIR_NAME}/ directory."
        )

    if start_path is None:
        start_path = Path.cwd()
    result = _walk_up_for_data_dir(Path(start_path))
    if result is not None:
        return result

    data_dir = load_global_config().get("data_dir")
    if data_dir:
        global_path = Path(data_dir).expanduser().resolve()
        if (global_path / DATA_DIR_NAME).is_dir():
            return global_path
        raise FileNotFoundError(
            f"Global config data_dir={data_dir} does not contain a {DATA_DIR_NAME}/ directory."
        )

    return Path.home()


@lru_cache(maxsize=1)
def get_tracker_root() -> Path:
    """Get the cached data root path."""
    return find_tracker_root()


def get_paths(root: Path | None = None) -> TrackerPaths:
    """Get all standard paths for the collection.

    Args:
        root: Data root (uses cached default if not provided)

    Returns:
        TrackerPaths dataclass with all paths
    """
    if root is None:
        root = get_tracker_root()

    root = Path(root)
    data_dir = root / DATA_DIR_NAME

    return TrackerPaths(
        root=root,
        data_dir=data_dir,
        storage_dir=data_dir,
        config_file=data_dir / "config.yaml",
        backups=data_dir / "backups",
        exports=root,
    )
