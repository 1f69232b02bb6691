"""
Collection statistics aggregator.

Pure aggregations over the media collection: type and favorite splits,
rating histogram, tag usage, season ratings, additions over time, top
rated titles and season completion.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from mediatracker.core.errors import InsufficientDataError
from mediatracker.core.models import MediaItem, MediaType, Tag

# Statistics are not meaningful for smaller collections
MIN_ITEMS_FOR_STATS = 3

# Inclusive on both ends: a rating of exactly 2, 4, 6 or 8 lands in two buckets
RATING_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("0-2", 0, 2),
    ("2-4", 2, 4),
    ("4-6", 4, 6),
    ("6-8", 6, 8),
    ("8-10", 8, 10),
)

DEFAULT_TAG_LIMIT = 10
DEFAULT_TOP_N = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class Bucket:
    """A named count, used for simple distributions."""

    name: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "count": self.count}


@dataclass
class TagStats:
    """How many items carry a tag."""

    tag_id: str
    name: str
    color: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag_id": self.tag_id,
            "name": self.name,
            "color": self.color,
            "count": self.count,
        }


@dataclass
class SeasonRatingTally:
    """Good/bad/unrated counts over every season of every series and anime."""

    good: int = 0
    bad: int = 0
    unrated: int = 0

    @property
    def total(self) -> int:
        return self.good + self.bad + self.unrated

    def to_dict(self) -> dict[str, Any]:
        return {
            "good": self.good,
            "bad": self.bad,
            "unrated": self.unrated,
            "total": self.total,
        }


@dataclass
class TimelineEntry:
    """Items added in one calendar month."""

    month: str  # YYYY-MM format
    count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "count": self.count}


@dataclass
class RatedEntry:
    """A rated title in the top-rated ranking."""

    media_id: str
    title: str
    type: MediaType
    rating: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.media_id,
            "title": self.title,
            "type": self.type.value,
            "rating": self.rating,
        }


@dataclass
class CompletionEntry:
    """Season completion of a series or anime."""

    media_id: str
    title: str
    type: MediaType
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return round_half_up(self.completed / self.total * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.media_id,
            "title": self.title,
            "type": self.type.value,
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
        }


def type_distribution(items: Iterable[MediaItem]) -> list[Bucket]:
    counts = dict.fromkeys(MediaType, 0)
    for item in items:
        counts[item.type] += 1
    return [Bucket(name=media_type.value, count=n) for media_type, n in counts.items()]


def favorite_distribution(items: Iterable[MediaItem]) -> list[Bucket]:
    favorites = 0
    others = 0
    for item in items:
        if item.is_favorite:
            favorites += 1
        else:
            others += 1
    return [Bucket(name="favorite", count=favorites), Bucket(name="not_favorite", count=others)]


def rating_histogram(items: Iterable[MediaItem]) -> list[Bucket]:
    """Count rated items per bucket; boundary ratings count in both neighbours."""
    ratings = [item.rating for item in items if item.rating is not None]
    return [
        Bucket(name=name, count=sum(1 for r in ratings if low <= r <= high))
        for name, low, high in RATING_BUCKETS
    ]


def tag_frequency(
    items: Iterable[MediaItem],
    tags: Iterable[Tag],
    limit: int | None = DEFAULT_TAG_LIMIT,
) -> list[TagStats]:
    """Usage count of each registered tag, most used first."""
    items = list(items)
    result = [
        TagStats(
            tag_id=tag.id,
            name=tag.name,
            color=tag.color,
            count=sum(1 for item in items if item.has_tag(tag.id)),
        )
        for tag in tags
    ]
    result.sort(key=lambda s: s.count, reverse=True)
    if limit is not None:
        result = result[:limit]
    return result


def season_rating_tally(items: Iterable[MediaItem]) -> SeasonRatingTally:
    tally = SeasonRatingTally()
    for item in items:
        if not item.type.has_seasons:
            continue
        for season in item.seasons:
            if season.rating == "good":
                tally.good += 1
            elif season.rating == "bad":
                tally.bad += 1
            else:
                tally.unrated += 1
    return tally


def additions_timeline(items: Iterable[MediaItem]) -> list[TimelineEntry]:
    """Items added per calendar month, oldest month first."""
    timeline: dict[str, TimelineEntry] = {}
    for item in items:
        month = item.date_added.strftime("%Y-%m")
        if month not in timeline:
            timeline[month] = TimelineEntry(month=month)
        timeline[month].count += 1
    return sorted(timeline.values(), key=lambda x: x.month)


def top_rated(items: Iterable[MediaItem], limit: int = DEFAULT_TOP_N) -> list[RatedEntry]:
    """Highest rated items; ties keep collection order."""
    rated = [item for item in items if item.rating is not None]
    rated.sort(key=lambda item: item.rating, reverse=True)  # type: ignore[arg-type,return-value]
    return [
        RatedEntry(media_id=item.id, title=item.title, type=item.type, rating=item.rating)  # type: ignore[arg-type]
        for item in rated[:limit]
    ]


def completion_stats(
    items: Iterable[MediaItem], limit: int | None = DEFAULT_TOP_N
) -> list[CompletionEntry]:
    """Completion of every series/anime with seasons, most complete first."""
    entries = [
        CompletionEntry(
            media_id=item.id,
            title=item.title,
            type=item.type,
            completed=item.completed_seasons,
            total=len(item.seasons),
        )
        for item in items
        if item.type.has_seasons and item.seasons
    ]
    entries.sort(key=lambda e: e.percentage, reverse=True)
    if limit is not None:
        entries = entries[:limit]
    return entries


class CollectionStats:
    """Statistics over a collection, refusing collections that are too small."""

    def __init__(self, items: Iterable[MediaItem], tags: Iterable[Tag] = ()):
        self.items = list(items)
        self.tags = list(tags)

    def has_enough_data(self) -> bool:
        return len(self.items) >= MIN_ITEMS_FOR_STATS

    def _require_data(self) -> None:
        if not self.has_enough_data():
            raise InsufficientDataError(len(self.items), MIN_ITEMS_FOR_STATS)

    def type_distribution(self) -> list[Bucket]:
        self._require_data()
        return type_distribution(self.items)

    def favorite_distribution(self) -> list[Bucket]:
        self._require_data()
        return favorite_distribution(self.items)

    def rating_histogram(self) -> list[Bucket]:
        self._require_data()
        return rating_histogram(self.items)

    def tag_frequency(self, limit: int | None = DEFAULT_TAG_LIMIT) -> list[TagStats]:
        self._require_data()
        return tag_frequency(self.items, self.tags, limit=limit)

    def season_ratings(self) -> SeasonRatingTally:
        self._require_data()
        return season_rating_tally(self.items)

    def timeline(self) -> list[TimelineEntry]:
        self._require_data()
        return additions_timeline(self.items)

    def top_rated(self, limit: int = DEFAULT_TOP_N) -> list[RatedEntry]:
        self._require_data()
        return top_rated(self.items, limit=limit)

    def completion(self, limit: int | None = DEFAULT_TOP_N) -> list[CompletionEntry]:
        self._require_data()
        return completion_stats(self.items, limit=limit)

    def get_summary(
        self,
        top_n: int = DEFAULT_TOP_N,
        tag_limit: int = DEFAULT_TAG_LIMIT,
    ) -> dict[str, Any]:
        """Every statistic in one JSON-ready dictionary."""
        self._require_data()
        return {
            "total": len(self.items),
            "types": [b.to_dict() for b in self.type_distribution()],
            "favorites": [b.to_dict() for b in self.favorite_distribution()],
            "ratings": [b.to_dict() for b in self.rating_histogram()],
            "tags": [t.to_dict() for t in self.tag_frequency(limit=tag_limit)],
            "season_ratings": self.season_ratings().to_dict(),
            "timeline": [t.to_dict() for t in self.timeline()],
            "top_rated": [r.to_dict() for r in self.top_rated(limit=top_n)],
            "completion": [c.to_dict() for c in self.completion(limit=top_n)],
        }
