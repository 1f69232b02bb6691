"""Core collection state for mediatracker."""

from mediatracker.core.backup import (
    DEFAULT_KEEP_COUNT,
    DEFAULT_KEEP_DAYS,
    RetentionPolicy,
    cleanup_old_backups,
    create_backup,
    safe_write_json,
)
from mediatracker.core.config import get_paths, get_tracker_root
from mediatracker.core.errors import (
    EmptySelectionError,
    ImportValidationError,
    InsufficientDataError,
    MediaTrackerError,
)
from mediatracker.core.models import MediaDraft, MediaItem, MediaType, Season, Tag
from mediatracker.core.store import MediaStore
from mediatracker.core.tags import TagRegistry

__all__ = [
    # Backup
    "create_backup",
    "safe_write_json",
    "cleanup_old_backups",
    "DEFAULT_KEEP_COUNT",
    "DEFAULT_KEEP_DAYS",
    "RetentionPolicy",
    # Config
    "get_tracker_root",
    "get_paths",
    # Errors
    "MediaTrackerError",
    "ImportValidationError",
    "EmptySelectionError",
    "InsufficientDataError",
    # Model
    "MediaType",
    "MediaItem",
    "MediaDraft",
    "Season",
    "Tag",
    # State
    "MediaStore",
    "TagRegistry",
]
