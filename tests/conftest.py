"""Shared test fixtures for the mediatracker package."""

import json
from datetime import datetime

import pytest

from mediatracker.core.models import MediaItem, MediaType, Season, Tag
from mediatracker.core.notify import Notifier
from mediatracker.core.storage import STORAGE_KEY, TAGS_STORAGE_KEY, MemoryStorage


@pytest.fixture
def quiet_notifier():
    """Notifier that records messages without printing."""
    return Notifier(quiet=True)


@pytest.fixture
def memory_storage():
    """Empty in-memory key-value storage."""
    return MemoryStorage()


@pytest.fixture
def make_item():
    """Factory fixture for media items with sensible defaults."""
    counter = {"n": 0}

    def _make(
        title: str = "Untitled",
        media_type: MediaType = MediaType.SERIES,
        rating: float | None = None,
        seasons: int = 0,
        tags: list[Tag] | None = None,
        date_added: datetime | None = None,
        **kwargs,
    ) -> MediaItem:
        counter["n"] += 1
        return MediaItem(
            id=kwargs.pop("id", f"item-{counter['n']}"),
            type=media_type,
            title=title,
            date_added=date_added or datetime(2024, 1, counter["n"], 12, 0),
            rating=rating,
            seasons=[Season(number=n, title=f"Season {n}") for n in range(1, seasons + 1)],
            tags=list(tags or []),
            **kwargs,
        )

    return _make


@pytest.fixture
def drama():
    return Tag(id="tag-drama", name="Drama", color="#ef4444")


@pytest.fixture
def scifi():
    return Tag(id="tag-scifi", name="Sci-Fi", color="#3b82f6")


@pytest.fixture
def sample_items(make_item, drama, scifi):
    """Three items: a tagged series, a rated movie and an unrated anime."""
    series = make_item(
        "The Expanse",
        MediaType.SERIES,
        rating=9.0,
        seasons=3,
        tags=[drama, scifi],
        is_favorite=True,
        date_added=datetime(2024, 3, 10, 20, 0),
    )
    series.seasons[0].completed = True
    series.seasons[0].rating = "good"
    series.seasons[1].rating = "bad"

    movie = make_item(
        "Arrival",
        MediaType.MOVIE,
        rating=6.0,
        seasons=1,
        tags=[scifi],
        date_added=datetime(2024, 3, 2, 9, 30),
    )
    movie.seasons[0].rating = "good"

    anime = make_item(
        "Mushishi",
        MediaType.ANIME,
        seasons=2,
        date_added=datetime(2024, 5, 1, 18, 0),
    )
    anime.seasons[0].completed = True
    anime.seasons[1].completed = True
    return [series, movie, anime]


@pytest.fixture
def tracker_home(tmp_path, monkeypatch):
    """Create a collection root with a .mediatracker/ directory."""
    data_dir = tmp_path / ".mediatracker"
    data_dir.mkdir()
    (data_dir / "backups").mkdir()

    # Mock get_tracker_root to return our tmp_path
    from mediatracker.core import config
    # Clear the lru_cache first
    config.get_tracker_root.cache_clear()
    monkeypatch.setattr(config, "get_tracker_root", lambda: tmp_path)
    monkeypatch.delenv("MEDIATRACKER_HOME", raising=False)

    return tmp_path


@pytest.fixture
def seed_collection(tracker_home):
    """Factory fixture that writes items and tags into the collection files."""
    def _seed(items=(), tags=()):
        data_dir = tracker_home / ".mediatracker"
        (data_dir / f"{STORAGE_KEY}.json").write_text(
            json.dumps([item.to_dict() for item in items], indent=2)
        )
        (data_dir / f"{TAGS_STORAGE_KEY}.json").write_text(
            json.dumps([tag.to_dict() for tag in tags], indent=2)
        )
        return data_dir

    return _seed


@pytest.fixture
def load_saved(tracker_home):
    """Read back the stored collection as raw JSON."""
    def _load(key: str = STORAGE_KEY):
        path = tracker_home / ".mediatracker" / f"{key}.json"
        if not path.exists():
            return None
        return json.loads(path.read_text())

    return _load
