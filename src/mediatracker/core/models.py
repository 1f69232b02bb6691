"""
Collection data model.

Media items, their seasons and tags, with conversion to and from the
stored JSON layout (camelCase keys, ISO date strings).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

SEASON_RATINGS = ("good", "bad")
RATING_MIN = 0.0
RATING_MAX = 10.0


class MediaType(str, Enum):
    """Kinds of tracked titles."""

    SERIES = "series"
    MOVIE = "movie"
    ANIME = "anime"

    @property
    def has_seasons(self) -> bool:
        return self is not MediaType.MOVIE


def parse_date(value: Any) -> datetime:
    """Rehydrate a stored date into a naive local datetime.

    Accepts datetime objects and ISO 8601 strings, including the trailing
    'Z' form written by browser exports.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not a date: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def validate_rating(value: float | None) -> float | None:
    """Check a media rating is unset or within 0-10 in half steps.

    Raises:
        ValueError: If the rating is out of range or not a multiple of 0.5
    """
    if value is None:
        return None
    rating = float(value)
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValueError(f"Rating must be between 0 and 10, got {rating}")
    if (rating * 2) != int(rating * 2):
        raise ValueError(f"Rating must be a multiple of 0.5, got {rating}")
    return rating


@dataclass
class Tag:
    """A user-defined label with a display colour."""

    id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        if not isinstance(data, dict):
            raise TypeError(f"Expected a tag object, got {type(data).__name__}")
        return cls(id=str(data["id"]), name=str(data["name"]), color=str(data["color"]))


@dataclass
class Season:
    """One installment of a series or anime."""

    number: int
    title: str | None = None
    completed: bool = False
    in_progress: bool = False
    rating: str | None = None  # "good", "bad" or unset

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "number": self.number,
            "completed": self.completed,
            "inProgress": self.in_progress,
        }
        if self.title is not None:
            data["title"] = self.title
        if self.rating is not None:
            data["rating"] = self.rating
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Season:
        if not isinstance(data, dict):
            raise TypeError(f"Expected a season object, got {type(data).__name__}")
        rating = data.get("rating")
        if rating is not None and rating not in SEASON_RATINGS:
            raise ValueError(f"Unknown season rating: {rating!r}")
        return cls(
            number=int(data["number"]),
            title=data.get("title"),
            completed=bool(data.get("completed", False)),
            in_progress=bool(data.get("inProgress", False)),
            rating=rating,
        )


def build_seasons(count: int) -> list[Season]:
    """Create ``count`` fresh seasons numbered from 1."""
    return [Season(number=n, title=f"Season {n}") for n in range(1, count + 1)]


@dataclass
class MediaItem:
    """One tracked title with its metadata and season progress."""

    id: str
    type: MediaType
    title: str
    date_added: datetime
    description: str = ""
    image_url: str = ""
    rating: float | None = None
    is_favorite: bool = False
    in_emission: bool = False
    seasons: list[Season] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    @property
    def completed_seasons(self) -> int:
        return sum(1 for season in self.seasons if season.completed)

    def get_season(self, number: int) -> Season | None:
        for season in self.seasons:
            if season.number == number:
                return season
        return None

    def has_tag(self, tag_id: str) -> bool:
        return any(tag.id == tag_id for tag in self.tags)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "rating": self.rating,
            "isFavorite": self.is_favorite,
            "inEmission": self.in_emission,
            "dateAdded": self.date_added.isoformat(),
            "seasons": [season.to_dict() for season in self.seasons],
            "tags": [tag.to_dict() for tag in self.tags],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MediaItem:
        """Build an item from its stored form.

        Items written before tags existed have no ``tags`` key; it defaults
        to an empty list. A missing ``dateAdded`` is treated as now.

        Raises:
            KeyError, TypeError, ValueError: If the entry does not have the
                shape of a media item
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected an object, got {type(data).__name__}")

        raw_date = data.get("dateAdded")
        rating = data.get("rating")
        return cls(
            id=str(data["id"]),
            type=MediaType(data["type"]),
            title=str(data["title"]),
            date_added=parse_date(raw_date) if raw_date is not None else datetime.now(),
            description=str(data.get("description") or ""),
            image_url=str(data.get("imageUrl") or ""),
            rating=float(rating) if rating is not None else None,
            is_favorite=bool(data.get("isFavorite", False)),
            in_emission=bool(data.get("inEmission", False)),
            seasons=[Season.from_dict(s) for s in data.get("seasons") or []],
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
        )


@dataclass
class MediaDraft:
    """Fields for a new media item, before it gets an id and date."""

    type: MediaType
    title: str
    description: str = ""
    image_url: str = ""
    rating: float | None = None
    is_favorite: bool = False
    in_emission: bool = False
    seasons: list[Season] = field(default_factory=list)
    tags: list[Tag] | None = None
