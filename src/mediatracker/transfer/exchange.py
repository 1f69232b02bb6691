"""
Import and export of media items.

An export is a pretty-printed JSON array of complete media items. Imports
validate every entry before adding any: one bad entry rejects the file.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Any

from mediatracker.core.errors import EmptySelectionError, ImportValidationError
from mediatracker.core.models import MediaItem
from mediatracker.core.store import MediaStore, new_id

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "mediatracker-export"
REQUIRED_FIELDS = ("id", "title", "type")


def default_export_name(today: date | None = None) -> str:
    """Default export file stem, e.g. ``mediatracker-export-2024-05-01``."""
    today = today or date.today()
    return f"{EXPORT_PREFIX}-{today.isoformat()}"


def export_filename(name: str | None) -> str:
    """Normalize a user-chosen export name into a ``.json`` filename."""
    stem = (name or "").strip()
    if stem.endswith(".json"):
        stem = stem[: -len(".json")]
    return f"{stem or EXPORT_PREFIX}.json"


def select_items(items: Iterable[MediaItem], ids: Iterable[str]) -> list[MediaItem]:
    """Items whose id is in *ids*, in collection order."""
    wanted = set(ids)
    return [item for item in items if item.id in wanted]


def export_media(items: Iterable[MediaItem], path: Path) -> int:
    """Write *items* to *path* as a pretty-printed JSON array.

    Returns:
        Number of items written

    Raises:
        EmptySelectionError: If there is nothing to export
    """
    selected = list(items)
    if not selected:
        raise EmptySelectionError("Select at least one item to export.")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps([item.to_dict() for item in selected], indent=2, ensure_ascii=False)
    path.write_text(payload + "\n", encoding="utf-8")
    logger.debug("Exported %d item(s) to %s", len(selected), path)
    return len(selected)


def validate_entry(entry: Any, index: int) -> None:
    """Check one imported entry has an id, title, type and a seasons list.

    Raises:
        ImportValidationError: If the entry is not usable
    """
    if not isinstance(entry, dict):
        raise ImportValidationError(f"Entry {index} is not an object", index=index)
    for key in REQUIRED_FIELDS:
        if not entry.get(key):
            raise ImportValidationError(f"Entry {index} is missing '{key}'", index=index)
    if not isinstance(entry.get("seasons"), list):
        raise ImportValidationError(f"Entry {index} has no 'seasons' list", index=index)


def parse_import(text: str) -> list[MediaItem]:
    """Parse and validate an export file's contents.

    Raises:
        ImportValidationError: If the text is not a JSON array of valid items
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportValidationError(f"Not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ImportValidationError("Expected a JSON array of media items")

    for index, entry in enumerate(data):
        validate_entry(entry, index)

    items = []
    for index, entry in enumerate(data):
        try:
            items.append(MediaItem.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            raise ImportValidationError(f"Entry {index} is malformed: {e}", index=index) from e
    return items


def resolve_id_collisions(items: list[MediaItem], existing_ids: Iterable[str]) -> list[str]:
    """Give a fresh id to every imported item whose id is already taken.

    Ids are checked against the collection and against earlier entries of
    the same import.

    Returns:
        The ids that collided
    """
    taken = set(existing_ids)
    collided = []
    for item in items:
        if item.id in taken:
            collided.append(item.id)
            item.id = new_id()
        taken.add(item.id)
    return collided


def import_media(store: MediaStore, path: Path) -> list[MediaItem]:
    """Append the items of an export file to the collection.

    Nothing is added unless every entry is valid. Items keep their id and
    date added; colliding ids are replaced with fresh ones.

    Raises:
        ImportValidationError: If the file is unreadable or any entry is invalid
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportValidationError(f"Cannot read {path}: {e}") from e

    items = parse_import(text)
    collided = resolve_id_collisions(items, (item.id for item in store))
    if collided:
        logger.warning("Assigned new ids to %d imported item(s) with taken ids", len(collided))

    return store.extend(items)
