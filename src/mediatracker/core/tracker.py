"""
Process-wide tracker state.

Opens the stored collection and tag list once and hands the wired-up store,
tag registry and notifier to every command that needs them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mediatracker.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS, RetentionPolicy
from mediatracker.core.config import TrackerPaths, get_paths
from mediatracker.core.errors import MediaTrackerError
from mediatracker.core.models import MediaItem, Tag
from mediatracker.core.notify import Notifier
from mediatracker.core.storage import (
    STORAGE_KEY,
    TAGS_STORAGE_KEY,
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    Persistence,
)
from mediatracker.core.store import MediaStore
from mediatracker.core.tags import TagRegistry


@dataclass
class Tracker:
    """The collection, its tags and where they are persisted."""

    store: MediaStore
    tags: TagRegistry
    persistence: Persistence
    notifier: Notifier

    def attach_tag(self, media_id: str, tag_id: str) -> bool:
        """Attach a registered tag to an item. Unknown media or tag is a no-op."""
        tag = self.tags.get_tag(tag_id)
        if tag is None:
            return False
        return self.store.add_tag_to_media(media_id, tag)

    def detach_tag(self, media_id: str, tag_id: str) -> bool:
        if tag_id not in self.tags:
            return False
        return self.store.remove_tag_from_media(media_id, tag_id)

    def find_media(self, ref: str) -> MediaItem | None:
        """Look up an item by full id or a unique id prefix.

        Raises:
            MediaTrackerError: If the prefix matches more than one item
        """
        item = self.store.get_media_by_id(ref)
        if item is not None or not ref:
            return item
        matches = [m for m in self.store if m.id.startswith(ref)]
        if len(matches) > 1:
            raise MediaTrackerError(f"'{ref}' matches {len(matches)} items; use a longer id")
        return matches[0] if matches else None

    def find_tag(self, ref: str) -> Tag | None:
        """Look up a tag by id, unique id prefix or unique name.

        Raises:
            MediaTrackerError: If the reference matches more than one tag
        """
        tag = self.tags.get_tag(ref)
        if tag is not None or not ref:
            return tag
        matches = self.tags.find_by_name(ref) or [t for t in self.tags if t.id.startswith(ref)]
        if len(matches) > 1:
            raise MediaTrackerError(f"'{ref}' matches {len(matches)} tags; use the tag id")
        return matches[0] if matches else None


def default_storage(paths: TrackerPaths | None = None) -> FileStorage:
    """File storage in the data directory, honouring the backup settings."""
    from mediatracker.config.commands import get_config_value

    if paths is None:
        paths = get_paths()
    Path(paths.storage_dir).mkdir(parents=True, exist_ok=True)
    return FileStorage(
        paths.storage_dir,
        backup_dir=paths.backups,
        retention=RetentionPolicy(
            keep_count=int(get_config_value("backup.keep_count", DEFAULT_KEEP_COUNT)),
            keep_days=int(get_config_value("backup.keep_days", DEFAULT_KEEP_DAYS)),
        ),
    )


def open_tracker(
    storage: KeyValueStorage | None = None,
    notifier: Notifier | None = None,
    dry_run: bool = False,
) -> Tracker:
    """Load the collection and tags and wire up the store and registry.

    Args:
        storage: Where state lives (defaults to the data directory)
        notifier: Receives user-facing messages (defaults to a console notifier)
        dry_run: Work on an in-memory copy so nothing is written back
    """
    if notifier is None:
        notifier = Notifier()
    if storage is None:
        storage = default_storage()
    if dry_run:
        storage = MemoryStorage.snapshot(storage, (STORAGE_KEY, TAGS_STORAGE_KEY))

    persistence = Persistence(storage, notifier)
    store = MediaStore(persistence.load_media(), persistence=persistence, notifier=notifier)
    registry = TagRegistry(
        store, persistence.load_tags(), persistence=persistence, notifier=notifier
    )
    return Tracker(store=store, tags=registry, persistence=persistence, notifier=notifier)
