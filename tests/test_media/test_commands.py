"""Tests for mediatracker.media.commands CLI module."""

import json

import pytest
from click.testing import CliRunner

from mediatracker.cli import main
from mediatracker.media.commands import _resize_seasons, media
from mediatracker.core.models import build_seasons


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def seeded(seed_collection, sample_items, drama, scifi):
    return seed_collection(sample_items, [drama, scifi])


def _saved_by_title(load_saved):
    return {entry["title"]: entry for entry in load_saved()}


class TestAdd:
    """Tests for media add."""

    def test_add_series(self, runner, tracker_home, load_saved):
        result = runner.invoke(
            media, ["add", "Breaking Bad", "--seasons", "5", "--rating", "9.5", "--in-emission"]
        )
        assert result.exit_code == 0
        assert "Added" in result.output

        saved = load_saved()
        assert len(saved) == 1
        assert saved[0]["type"] == "series"
        assert saved[0]["rating"] == 9.5
        assert saved[0]["inEmission"] is True
        assert [s["number"] for s in saved[0]["seasons"]] == [1, 2, 3, 4, 5]
        assert saved[0]["tags"] == []

    def test_movie_gets_single_season(self, runner, tracker_home, load_saved):
        result = runner.invoke(media, ["add", "Spirited Away", "-t", "movie", "--seasons", "4"])
        assert result.exit_code == 0
        assert len(load_saved()[0]["seasons"]) == 1

    def test_rejects_bad_rating(self, runner, tracker_home, load_saved):
        result = runner.invoke(media, ["add", "Dark", "--rating", "7.3"])
        assert result.exit_code == 2
        assert "0.5" in result.output
        assert load_saved() is None

    def test_with_tag_by_name(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["add", "Frieren", "-t", "anime", "--tag", "drama"])
        assert result.exit_code == 0
        frieren = _saved_by_title(load_saved)["Frieren"]
        assert [t["id"] for t in frieren["tags"]] == ["tag-drama"]

    def test_unknown_tag_adds_nothing(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["add", "Frieren", "--tag", "comedy"])
        assert result.exit_code == 1
        assert "Tag not found" in result.output
        assert "Frieren" not in _saved_by_title(load_saved)


class TestList:
    """Tests for media list."""

    def test_empty(self, runner, tracker_home):
        result = runner.invoke(media, ["list"])
        assert result.exit_code == 0
        assert "collection is empty" in result.output

    def test_json_all(self, runner, seeded):
        result = runner.invoke(media, ["list", "--json"])
        assert [e["title"] for e in json.loads(result.output)] == [
            "The Expanse",
            "Arrival",
            "Mushishi",
        ]

    def test_filters_combine(self, runner, seeded):
        result = runner.invoke(media, ["list", "--json", "--tag", "Sci-Fi", "--min-rating", "7"])
        assert [e["title"] for e in json.loads(result.output)] == ["The Expanse"]

    def test_type_filter(self, runner, seeded):
        result = runner.invoke(media, ["list", "--json", "-t", "anime"])
        assert [e["title"] for e in json.loads(result.output)] == ["Mushishi"]

    def test_query_filter(self, runner, seeded):
        result = runner.invoke(media, ["list", "--json", "-q", "arr"])
        assert [e["title"] for e in json.loads(result.output)] == ["Arrival"]

    def test_no_match(self, runner, seeded):
        result = runner.invoke(media, ["list", "--favorites", "-t", "movie"])
        assert "No titles match" in result.output

    def test_bad_range(self, runner, seeded):
        result = runner.invoke(media, ["list", "--min-rating", "8", "--max-rating", "2"])
        assert result.exit_code == 2

    def test_table(self, runner, seeded):
        result = runner.invoke(media, ["list"])
        assert result.exit_code == 0
        assert "Arrival" in result.output
        assert "3 of 3" in result.output


class TestShowEditDelete:
    """Tests for show, edit, delete and favorite."""

    def test_show_json(self, runner, seeded):
        result = runner.invoke(media, ["show", "item-2", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["title"] == "Arrival"

    def test_show_table(self, runner, seeded):
        result = runner.invoke(media, ["show", "item-1"])
        assert result.exit_code == 0
        assert "The Expanse" in result.output
        assert "Seasons" in result.output
        assert "watched" in result.output

    def test_show_unknown(self, runner, seeded):
        result = runner.invoke(media, ["show", "nope"])
        assert result.exit_code == 1
        assert "Media not found" in result.output

    def test_show_ambiguous_prefix(self, runner, seeded):
        result = runner.invoke(media, ["show", "item"])
        assert result.exit_code == 1
        assert "matches 3 items" in result.output

    def test_edit(self, runner, seeded, load_saved):
        result = runner.invoke(
            media, ["edit", "item-2", "--title", "Arrival (2016)", "--rating", "8"]
        )
        assert result.exit_code == 0
        saved = _saved_by_title(load_saved)["Arrival (2016)"]
        assert saved["rating"] == 8.0
        assert saved["id"] == "item-2"

    def test_edit_clear_rating(self, runner, seeded, load_saved):
        runner.invoke(media, ["edit", "item-1", "--clear-rating"])
        assert _saved_by_title(load_saved)["The Expanse"]["rating"] is None

    def test_edit_seasons_keeps_progress(self, runner, seeded, load_saved):
        runner.invoke(media, ["edit", "item-1", "--seasons", "4"])
        seasons = _saved_by_title(load_saved)["The Expanse"]["seasons"]
        assert [s["number"] for s in seasons] == [1, 2, 3, 4]
        assert seasons[0]["completed"] is True
        assert seasons[0]["rating"] == "good"

    def test_delete_force(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["delete", "item-3", "--force"])
        assert result.exit_code == 0
        assert "Mushishi" not in _saved_by_title(load_saved)

    def test_delete_cancelled(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["delete", "item-3"], input="n\n")
        assert "Cancelled" in result.output
        assert "Mushishi" in _saved_by_title(load_saved)

    def test_favorite_toggle(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["favorite", "item-2"])
        assert "marked as favorite" in result.output
        assert _saved_by_title(load_saved)["Arrival"]["isFavorite"] is True

        result = runner.invoke(media, ["favorite", "item-2"])
        assert "removed from favorites" in result.output


class TestSeason:
    """Tests for media season."""

    def _season(self, load_saved, title, number):
        return _saved_by_title(load_saved)[title]["seasons"][number - 1]

    def test_watched(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["season", "item-1", "3", "--watched"])
        assert result.exit_code == 0
        season = self._season(load_saved, "The Expanse", 3)
        assert (season["completed"], season["inProgress"]) == (True, False)

    def test_unwatched_means_in_progress(self, runner, seeded, load_saved):
        runner.invoke(media, ["season", "item-1", "1", "--unwatched"])
        season = self._season(load_saved, "The Expanse", 1)
        assert (season["completed"], season["inProgress"]) == (False, True)

    def test_watching(self, runner, seeded, load_saved):
        runner.invoke(media, ["season", "item-3", "2", "--watching"])
        season = self._season(load_saved, "Mushishi", 2)
        assert (season["completed"], season["inProgress"]) == (False, True)

    def test_rate_toggles(self, runner, seeded, load_saved):
        runner.invoke(media, ["season", "item-1", "3", "--rate", "good"])
        assert self._season(load_saved, "The Expanse", 3)["rating"] == "good"

        runner.invoke(media, ["season", "item-1", "3", "--rate", "good"])
        assert "rating" not in self._season(load_saved, "The Expanse", 3)

    def test_unknown_season(self, runner, seeded):
        result = runner.invoke(media, ["season", "item-1", "9", "--watched"])
        assert result.exit_code == 1
        assert "no season 9" in result.output

    def test_nothing_to_do(self, runner, seeded):
        result = runner.invoke(media, ["season", "item-1", "1"])
        assert result.exit_code == 2


class TestTagging:
    """Tests for media tag and untag."""

    def test_tag(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["tag", "item-3", "drama", "sci-fi"])
        assert result.exit_code == 0
        tags = _saved_by_title(load_saved)["Mushishi"]["tags"]
        assert [t["id"] for t in tags] == ["tag-drama", "tag-scifi"]

    def test_tag_already_present(self, runner, seeded):
        result = runner.invoke(media, ["tag", "item-1", "drama"])
        assert "already has tag" in result.output

    def test_untag(self, runner, seeded, load_saved):
        result = runner.invoke(media, ["untag", "item-1", "tag-drama"])
        assert result.exit_code == 0
        tags = _saved_by_title(load_saved)["The Expanse"]["tags"]
        assert [t["id"] for t in tags] == ["tag-scifi"]


def test_recent_json(runner, seeded):
    result = runner.invoke(media, ["recent", "--json", "--limit", "2"])
    assert [e["title"] for e in json.loads(result.output)] == ["Mushishi", "The Expanse"]


def test_dry_run_writes_nothing(runner, seeded, load_saved):
    before = load_saved()
    result = runner.invoke(main, ["--dry-run", "media", "delete", "item-1", "--force"])
    assert result.exit_code == 0
    assert "DRY RUN" in result.output
    assert load_saved() == before


def test_resize_seasons_trims():
    seasons = build_seasons(4)
    seasons[1].completed = True
    resized = _resize_seasons(seasons, 2)
    assert [s.number for s in resized] == [1, 2]
    assert resized[1].completed is True
