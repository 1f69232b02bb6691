"""
Tag registry.

Owns the list of user-defined tags. Media items carry denormalized copies
of their tags, so renaming, recolouring or deleting a tag here is pushed
explicitly into every item through the media store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from mediatracker.core.models import Tag
from mediatracker.core.store import MediaStore, new_id

if TYPE_CHECKING:
    from mediatracker.core.notify import Notifier
    from mediatracker.core.storage import Persistence

logger = logging.getLogger(__name__)


class TagRegistry:
    """In-memory tag set with cascading updates into the media store."""

    def __init__(
        self,
        store: MediaStore,
        tags: list[Tag] | None = None,
        persistence: Persistence | None = None,
        notifier: Notifier | None = None,
    ):
        self.store = store
        self._tags: list[Tag] = list(tags or [])
        self.persistence = persistence
        self.notifier = notifier

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(list(self._tags))

    def __contains__(self, tag_id: str) -> bool:
        return self.get_tag(tag_id) is not None

    def get_tag(self, tag_id: str) -> Tag | None:
        for tag in self._tags:
            if tag.id == tag_id:
                return tag
        return None

    def find_by_name(self, name: str) -> list[Tag]:
        """Tags whose name matches *name*, ignoring case (names are not unique)."""
        wanted = name.casefold()
        return [tag for tag in self._tags if tag.name.casefold() == wanted]

    def _save(self) -> None:
        if self.persistence is not None:
            self.persistence.save_tags(self._tags)

    def add_tag(self, name: str, color: str) -> Tag:
        """Create a tag and return it for immediate use."""
        tag = Tag(id=new_id(), name=name, color=color)
        self._tags.append(tag)
        self._save()
        if self.notifier:
            self.notifier.success("Tag created", f'The tag "{name}" has been created')
        return tag

    def update_tag(self, tag: Tag) -> bool:
        """Replace a tag by id and refresh its copies on every media item."""
        for i, existing in enumerate(self._tags):
            if existing.id == tag.id:
                break
        else:
            logger.debug("update_tag: unknown id %s", tag.id)
            return False

        self._tags[i] = tag
        self._save()
        touched = self.store.propagate_tag(tag)
        logger.debug("Propagated tag %s to %d item(s)", tag.id, touched)
        if self.notifier:
            self.notifier.success("Tag updated", f'The tag "{tag.name}" has been updated')
        return True

    def delete_tag(self, tag_id: str) -> bool:
        """Remove a tag from the registry and from every media item."""
        tag = self.get_tag(tag_id)
        if tag is None:
            return False

        touched = self.store.strip_tag(tag_id)
        self._tags = [t for t in self._tags if t.id != tag_id]
        self._save()
        logger.debug("Stripped tag %s from %d item(s)", tag_id, touched)
        if self.notifier:
            self.notifier.success("Tag deleted", f'The tag "{tag.name}" has been deleted')
        return True
