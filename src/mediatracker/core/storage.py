"""
Local persistence for the collection and tag list.

State lives in a small key-value store under two fixed keys, each holding a
JSON array. ``FileStorage`` keeps one JSON file per key in the data
directory; ``MemoryStorage`` keeps serialized strings in a dict.

Loading never crashes: a missing key is an empty list and an unreadable or
malformed value is logged and treated as empty. Saving always writes the
complete current list.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from mediatracker.core.backup import RetentionPolicy, safe_write_json
from mediatracker.core.models import MediaItem, Tag
from mediatracker.core.notify import Notifier

logger = logging.getLogger(__name__)

STORAGE_KEY = "media-tracker-data"
TAGS_STORAGE_KEY = "media-tracker-tags"

T = TypeVar("T")


@runtime_checkable
class KeyValueStorage(Protocol):
    """Minimal string-keyed store for JSON documents."""

    def read(self, key: str) -> str | None:
        """Return the raw JSON text stored under *key*, or None."""
        ...

    def write(self, key: str, data: Any) -> None:
        """Serialize *data* and store it under *key*."""
        ...


class MemoryStorage:
    """In-process storage, used for tests and dry runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, data: Any) -> None:
        self._data[key] = json.dumps(data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @classmethod
    def snapshot(cls, storage: KeyValueStorage, keys: tuple[str, ...]) -> MemoryStorage:
        """Copy the raw values under *keys* so later writes never reach *storage*."""
        initial = {}
        for key in keys:
            raw = storage.read(key)
            if raw is not None:
                initial[key] = raw
        return cls(initial)


class FileStorage:
    """One JSON file per key, written atomically with rotated backups."""

    def __init__(
        self,
        directory: Path,
        backup_dir: Path | None = None,
        retention: RetentionPolicy | None = RetentionPolicy(),
    ):
        self.directory = Path(directory)
        self.backup_dir = Path(backup_dir) if backup_dir else self.directory / "backups"
        # None disables backups
        self.retention = retention

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, data: Any) -> None:
        safe_write_json(
            self.path_for(key),
            data,
            backup_dir=self.backup_dir,
            policy=self.retention,
            backup=self.retention is not None,
        )

    def __contains__(self, key: str) -> bool:
        return self.path_for(key).exists()


class Persistence:
    """Reads and writes the collection and tags through a KeyValueStorage."""

    def __init__(self, storage: KeyValueStorage, notifier: Notifier | None = None):
        self.storage = storage
        self.notifier = notifier

    def _load_list(self, key: str, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        """Load a JSON array under *key*, parsing every entry.

        Raises:
            ValueError: If the stored value is not valid JSON or any entry
                does not have the expected shape
            OSError: If the stored value cannot be read
        """
        raw = self.storage.read(key)
        if raw is None or not raw.strip():
            return []

        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array under {key}, got {type(data).__name__}")

        try:
            return [parse(entry) for entry in data]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed entry under {key}: {e!r}") from e

    def load_media(self) -> list[MediaItem]:
        """Load the collection, rehydrating dates and missing tag lists."""
        try:
            items = self._load_list(STORAGE_KEY, MediaItem.from_dict)
        except (OSError, ValueError) as e:
            logger.error("Failed to load saved collection: %s", e)
            if self.notifier:
                self.notifier.error("Error", "Could not load the saved collection.")
            return []
        logger.debug("Loaded %d media item(s)", len(items))
        return items

    def load_tags(self) -> list[Tag]:
        """Load the tag list. Failures are logged only."""
        try:
            tags = self._load_list(TAGS_STORAGE_KEY, Tag.from_dict)
        except (OSError, ValueError) as e:
            logger.error("Failed to load saved tags: %s", e)
            return []
        logger.debug("Loaded %d tag(s)", len(tags))
        return tags

    def save_media(self, items: list[MediaItem]) -> None:
        self.storage.write(STORAGE_KEY, [item.to_dict() for item in items])

    def save_tags(self, tags: list[Tag]) -> None:
        self.storage.write(TAGS_STORAGE_KEY, [tag.to_dict() for tag in tags])
