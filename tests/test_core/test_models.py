"""Tests for mediatracker.core.models module."""

from datetime import datetime, timezone

import pytest

from mediatracker.core.models import (
    MediaItem,
    MediaType,
    Season,
    Tag,
    build_seasons,
    parse_date,
    validate_rating,
)


class TestMediaType:
    """Tests for MediaType."""

    def test_values(self):
        assert [t.value for t in MediaType] == ["series", "movie", "anime"]

    def test_movies_have_no_seasons(self):
        assert MediaType.MOVIE.has_seasons is False
        assert MediaType.SERIES.has_seasons is True
        assert MediaType.ANIME.has_seasons is True


class TestParseDate:
    """Tests for parse_date function."""

    def test_naive_iso_string(self):
        assert parse_date("2024-03-10T20:00:00") == datetime(2024, 3, 10, 20, 0)

    def test_z_suffix_becomes_local_naive(self):
        parsed = parse_date("2024-03-10T20:00:00.000Z")
        expected = (
            datetime(2024, 3, 10, 20, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        )
        assert parsed == expected
        assert parsed.tzinfo is None

    def test_datetime_passes_through(self):
        value = datetime(2023, 1, 1)
        assert parse_date(value) is value

    def test_rejects_non_dates(self):
        with pytest.raises(ValueError):
            parse_date(12345)

    def test_rejects_garbage_string(self):
        with pytest.raises(ValueError):
            parse_date("not a date")


class TestValidateRating:
    """Tests for validate_rating function."""

    @pytest.mark.parametrize("value", [0, 0.5, 7.5, 10])
    def test_accepts_half_steps(self, value):
        assert validate_rating(value) == float(value)

    def test_none_is_unrated(self):
        assert validate_rating(None) is None

    @pytest.mark.parametrize("value", [-0.5, 10.5, 11])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValueError, match="between 0 and 10"):
            validate_rating(value)

    def test_rejects_non_half_step(self):
        with pytest.raises(ValueError, match="multiple of 0.5"):
            validate_rating(7.3)


class TestSeason:
    """Tests for Season serialization."""

    def test_to_dict_uses_camel_case_and_omits_unset(self):
        data = Season(number=2, in_progress=True).to_dict()
        assert data == {"number": 2, "completed": False, "inProgress": True}

    def test_from_dict(self):
        season = Season.from_dict(
            {"number": 1, "title": "Season 1", "completed": True, "rating": "good"}
        )
        assert season.completed is True
        assert season.in_progress is False
        assert season.rating == "good"

    def test_from_dict_rejects_unknown_rating(self):
        with pytest.raises(ValueError):
            Season.from_dict({"number": 1, "rating": "meh"})

    def test_build_seasons(self):
        seasons = build_seasons(3)
        assert [s.number for s in seasons] == [1, 2, 3]
        assert seasons[2].title == "Season 3"
        assert not any(s.completed or s.in_progress for s in seasons)


class TestMediaItem:
    """Tests for MediaItem."""

    def test_completed_seasons(self, make_item):
        item = make_item(seasons=3)
        item.seasons[0].completed = True
        item.seasons[2].completed = True
        assert item.completed_seasons == 2

    def test_get_season(self, make_item):
        item = make_item(seasons=2)
        assert item.get_season(2).number == 2
        assert item.get_season(5) is None

    def test_has_tag(self, make_item, drama):
        item = make_item(tags=[drama])
        assert item.has_tag("tag-drama")
        assert not item.has_tag("tag-other")

    def test_to_dict_layout(self, make_item, drama):
        item = make_item("Dark", rating=8.5, seasons=1, tags=[drama], is_favorite=True)
        data = item.to_dict()

        assert data["type"] == "series"
        assert data["isFavorite"] is True
        assert data["inEmission"] is False
        assert data["imageUrl"] == ""
        assert data["rating"] == 8.5
        assert data["dateAdded"] == item.date_added.isoformat()
        assert data["tags"] == [{"id": "tag-drama", "name": "Drama", "color": "#ef4444"}]

    def test_from_dict_restores_item(self, make_item, drama):
        item = make_item("Dark", rating=8.5, seasons=2, tags=[drama])
        item.seasons[1].rating = "bad"

        restored = MediaItem.from_dict(item.to_dict())
        assert restored == item

    def test_from_dict_defaults_missing_tags(self):
        item = MediaItem.from_dict(
            {
                "id": "x",
                "type": "movie",
                "title": "Old Entry",
                "dateAdded": "2022-06-01T10:00:00",
                "seasons": [],
            }
        )
        assert item.tags == []
        assert item.rating is None
        assert item.date_added == datetime(2022, 6, 1, 10, 0)

    def test_from_dict_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            MediaItem.from_dict({"id": "x", "type": "podcast", "title": "T"})

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(TypeError):
            MediaItem.from_dict(["not", "a", "dict"])

    def test_tag_from_dict(self):
        tag = Tag.from_dict({"id": "t1", "name": "Comedy", "color": "#fff"})
        assert tag == Tag(id="t1", name="Comedy", color="#fff")
