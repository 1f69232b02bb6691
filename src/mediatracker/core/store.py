"""
The media collection store.

MediaStore owns the ordered list of media items and is the single source
of truth for every view. Each mutation writes the whole collection back
through the persistence layer and then notifies subscribers, so a reader
sees the change as soon as the mutating call returns.

Operations against an unknown id are silent no-ops.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime
from typing import TYPE_CHECKING, Any

from mediatracker.core.models import SEASON_RATINGS, MediaDraft, MediaItem, MediaType, Tag

if TYPE_CHECKING:
    from mediatracker.core.notify import Notifier
    from mediatracker.core.storage import Persistence

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks "leave the season rating as it is"
UNSET: Any = _Unset()


def new_id() -> str:
    return str(uuid.uuid4())


class MediaStore:
    """Ordered media collection with subscribe/notify."""

    def __init__(
        self,
        items: Iterable[MediaItem] | None = None,
        persistence: Persistence | None = None,
        notifier: Notifier | None = None,
    ):
        self._items: list[MediaItem] = list(items or [])
        self._listeners: list[Listener] = []
        self.persistence = persistence
        self.notifier = notifier

    # -- reading -----------------------------------------------------------

    @property
    def items(self) -> list[MediaItem]:
        """Snapshot of the collection in insertion order."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[MediaItem]:
        return iter(list(self._items))

    def __contains__(self, media_id: str) -> bool:
        return self._index_of(media_id) is not None

    def get_media_by_id(self, media_id: str) -> MediaItem | None:
        index = self._index_of(media_id)
        return self._items[index] if index is not None else None

    def get_media_by_type(self, media_type: MediaType | str) -> list[MediaItem]:
        media_type = MediaType(media_type)
        return [item for item in self._items if item.type is media_type]

    def recent_media(self, limit: int = 3) -> list[MediaItem]:
        """Most recently added items, newest first."""
        return sorted(self._items, key=lambda item: item.date_added, reverse=True)[:limit]

    def _index_of(self, media_id: str) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == media_id:
                return i
        return None

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* to be called with the event name after each change.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, event: str) -> None:
        if self.persistence is not None:
            self.persistence.save_media(self._items)
        for listener in list(self._listeners):
            listener(event)

    def _notify(self, title: str, message: str) -> None:
        if self.notifier is not None:
            self.notifier.success(title, message)

    # -- mutations ---------------------------------------------------------

    def add_media(self, draft: MediaDraft) -> MediaItem:
        """Add a new item with a fresh id and the current time."""
        item = MediaItem(
            id=new_id(),
            type=MediaType(draft.type),
            title=draft.title,
            date_added=datetime.now(),
            description=draft.description,
            image_url=draft.image_url,
            rating=draft.rating,
            is_favorite=draft.is_favorite,
            in_emission=draft.in_emission,
            seasons=copy.deepcopy(draft.seasons),
            tags=copy.deepcopy(draft.tags) if draft.tags is not None else [],
        )
        self._items.append(item)
        logger.debug("Added media %s (%s)", item.id, item.title)
        self._commit("add")
        self._notify("Added", f"{item.title} has been added to your collection")
        return item

    def extend(self, items: Iterable[MediaItem]) -> list[MediaItem]:
        """Append already-built items (imports) in one write."""
        added = list(items)
        if not added:
            return []
        self._items.extend(added)
        self._commit("import")
        return added

    def update_media(self, item: MediaItem) -> bool:
        """Replace the item with the same id wholesale.

        Returns:
            True if an item was replaced, False if the id is unknown
        """
        index = self._index_of(item.id)
        if index is None:
            logger.debug("update_media: unknown id %s", item.id)
            return False
        self._items[index] = item
        self._commit("update")
        self._notify("Updated", f"{item.title} has been updated")
        return True

    def delete_media(self, media_id: str) -> bool:
        index = self._index_of(media_id)
        if index is None:
            return False
        removed = self._items.pop(index)
        self._commit("delete")
        self._notify("Deleted", f"{removed.title} has been deleted")
        return True

    def toggle_favorite(self, media_id: str) -> bool | None:
        """Flip the favorite flag.

        Returns:
            The new flag value, or None if the id is unknown
        """
        item = self.get_media_by_id(media_id)
        if item is None:
            return None
        item.is_favorite = not item.is_favorite
        self._commit("favorite")
        return item.is_favorite

    def update_season_status(
        self,
        media_id: str,
        season_number: int,
        completed: bool,
        in_progress: bool,
        rating: str | None = UNSET,
    ) -> bool:
        """Set a season's progress flags and optionally its rating.

        ``completed`` and ``in_progress`` are replaced unconditionally.
        ``rating`` is only touched when passed: the season's current value
        clears it, ``None`` clears it, and "good"/"bad" sets it.

        Returns:
            True if the season was found and updated
        """
        if rating is not UNSET and rating is not None and rating not in SEASON_RATINGS:
            raise ValueError(f"Season rating must be one of {SEASON_RATINGS}, got {rating!r}")

        item = self.get_media_by_id(media_id)
        season = item.get_season(season_number) if item else None
        if season is None:
            return False

        season.completed = completed
        season.in_progress = in_progress
        if rating is not UNSET:
            season.rating = None if rating == season.rating else rating

        self._commit("season")
        return True

    def set_season_completed(self, media_id: str, season_number: int, completed: bool) -> bool:
        """Mark a season watched (or not); the in-progress flag takes the opposite value."""
        return self.update_season_status(media_id, season_number, completed, not completed)

    def rate_season(self, media_id: str, season_number: int, rating: str) -> bool:
        """Toggle a season's good/bad rating, keeping its progress flags."""
        item = self.get_media_by_id(media_id)
        season = item.get_season(season_number) if item else None
        if season is None:
            return False
        return self.update_season_status(
            media_id, season_number, season.completed, season.in_progress, rating
        )

    def add_tag_to_media(self, media_id: str, tag: Tag) -> bool:
        item = self.get_media_by_id(media_id)
        if item is None or item.has_tag(tag.id):
            return False
        item.tags.append(copy.copy(tag))
        self._commit("tags")
        self._notify("Tag added", f'"{tag.name}" has been added to "{item.title}"')
        return True

    def remove_tag_from_media(self, media_id: str, tag_id: str) -> bool:
        item = self.get_media_by_id(media_id)
        if item is None or not item.has_tag(tag_id):
            return False
        item.tags = [tag for tag in item.tags if tag.id != tag_id]
        self._commit("tags")
        return True

    # -- tag cascades (driven by the tag registry) -------------------------

    def propagate_tag(self, tag: Tag) -> int:
        """Overwrite every embedded copy of *tag* with its new name and colour.

        Returns:
            Number of items touched
        """
        touched = 0
        for item in self._items:
            for i, embedded in enumerate(item.tags):
                if embedded.id == tag.id:
                    item.tags[i] = copy.copy(tag)
                    touched += 1
        self._commit("tags")
        return touched

    def strip_tag(self, tag_id: str) -> int:
        """Remove *tag_id* from every item.

        Returns:
            Number of items touched
        """
        touched = 0
        for item in self._items:
            if item.has_tag(tag_id):
                item.tags = [tag for tag in item.tags if tag.id != tag_id]
                touched += 1
        self._commit("tags")
        return touched
