"""
Filtering of the media collection.

A FilterSpec combines independent criteria with AND. ``filter_media`` is a
pure function of (collection, spec); ``FilteredView`` keeps the result
current by listening to the store and recomputing lazily.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from mediatracker.core.models import RATING_MAX, RATING_MIN, MediaItem, MediaType

if TYPE_CHECKING:
    from mediatracker.core.store import MediaStore


@dataclass(frozen=True)
class FilterSpec:
    """Active search/type/favorite/tag/rating criteria."""

    media_type: MediaType | None = None
    query: str = ""
    favorites_only: bool = False
    tag_ids: frozenset[str] = frozenset()
    min_rating: float = RATING_MIN
    max_rating: float = RATING_MAX

    def __post_init__(self) -> None:
        if self.min_rating > self.max_rating:
            raise ValueError(
                f"min_rating ({self.min_rating}) is greater than max_rating ({self.max_rating})"
            )
        if self.media_type is not None and not isinstance(self.media_type, MediaType):
            object.__setattr__(self, "media_type", MediaType(self.media_type))
        # Accept any iterable of ids
        if not isinstance(self.tag_ids, frozenset):
            object.__setattr__(self, "tag_ids", frozenset(self.tag_ids))

    @property
    def rating_narrowed(self) -> bool:
        return self.min_rating > RATING_MIN or self.max_rating < RATING_MAX

    @property
    def is_active(self) -> bool:
        """True when any criterion other than the type is narrower than the default."""
        return bool(
            self.query or self.favorites_only or self.tag_ids or self.rating_narrowed
        )

    def with_changes(self, **changes: object) -> FilterSpec:
        return replace(self, **changes)  # type: ignore[arg-type]


def matches_type(item: MediaItem, spec: FilterSpec) -> bool:
    return spec.media_type is None or item.type is spec.media_type


def matches_query(item: MediaItem, spec: FilterSpec) -> bool:
    if not spec.query:
        return True
    needle = spec.query.lower()
    return needle in item.title.lower() or needle in item.description.lower()


def matches_favorite(item: MediaItem, spec: FilterSpec) -> bool:
    return item.is_favorite if spec.favorites_only else True


def matches_tags(item: MediaItem, spec: FilterSpec) -> bool:
    """Every selected tag must be on the item."""
    if not spec.tag_ids:
        return True
    item_tag_ids = {tag.id for tag in item.tags}
    return spec.tag_ids <= item_tag_ids


def matches_rating(item: MediaItem, spec: FilterSpec) -> bool:
    """Rating inside [min, max]; unrated items only pass while the lower bound is 0."""
    if item.rating is None:
        return spec.min_rating == RATING_MIN
    return spec.min_rating <= item.rating <= spec.max_rating


PREDICATES: tuple[Callable[[MediaItem, FilterSpec], bool], ...] = (
    matches_type,
    matches_query,
    matches_favorite,
    matches_tags,
    matches_rating,
)


def filter_media(items: Iterable[MediaItem], spec: FilterSpec) -> list[MediaItem]:
    """Return the items matching every criterion in *spec*, keeping order."""
    return [item for item in items if all(pred(item, spec) for pred in PREDICATES)]


class FilteredView:
    """Filtered subset of a store that stays current as the store changes."""

    def __init__(self, store: MediaStore, spec: FilterSpec | None = None):
        self.store = store
        self._spec = spec or FilterSpec()
        self._cache: list[MediaItem] | None = None
        self._unsubscribe = store.subscribe(self._invalidate)

    def _invalidate(self, _event: str = "") -> None:
        self._cache = None

    @property
    def spec(self) -> FilterSpec:
        return self._spec

    @spec.setter
    def spec(self, spec: FilterSpec) -> None:
        if spec != self._spec:
            self._spec = spec
            self._invalidate()

    @property
    def items(self) -> list[MediaItem]:
        if self._cache is None:
            self._cache = filter_media(self.store.items, self._spec)
        return list(self._cache)

    def __len__(self) -> int:
        return len(self.items)

    def close(self) -> None:
        """Stop listening to the store."""
        self._unsubscribe()
