"""Tests for mediatracker.filtering.engine module."""

import pytest

from mediatracker.core.models import MediaDraft, MediaType
from mediatracker.core.store import MediaStore
from mediatracker.filtering import FilteredView, FilterSpec, filter_media


def _titles(items):
    return [item.title for item in items]


class TestFilterSpec:
    """Tests for FilterSpec construction."""

    def test_defaults_are_inactive(self):
        spec = FilterSpec()
        assert spec.is_active is False
        assert spec.rating_narrowed is False

    def test_type_alone_is_not_active(self):
        assert FilterSpec(media_type="anime").is_active is False

    def test_coerces_type_and_tags(self):
        spec = FilterSpec(media_type="movie", tag_ids=["a", "b"])
        assert spec.media_type is MediaType.MOVIE
        assert spec.tag_ids == frozenset({"a", "b"})

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            FilterSpec(min_rating=8, max_rating=5)

    def test_with_changes(self):
        spec = FilterSpec(query="dark")
        changed = spec.with_changes(favorites_only=True)
        assert changed.query == "dark"
        assert changed.favorites_only is True
        assert spec.favorites_only is False


class TestFilterMedia:
    """Tests for filter_media."""

    def test_no_criteria_returns_everything_in_order(self, sample_items):
        assert filter_media(sample_items, FilterSpec()) == sample_items

    def test_by_type(self, sample_items):
        assert _titles(filter_media(sample_items, FilterSpec(media_type="movie"))) == ["Arrival"]

    def test_query_matches_title_case_insensitively(self, sample_items):
        assert _titles(filter_media(sample_items, FilterSpec(query="EXPANSE"))) == [
            "The Expanse"
        ]

    def test_query_matches_description(self, make_item):
        items = [
            make_item("Cowboy Bebop", description="Bounty hunters in space"),
            make_item("Mushishi", description="A wandering healer"),
        ]
        assert _titles(filter_media(items, FilterSpec(query="space"))) == ["Cowboy Bebop"]

    def test_favorites_only(self, sample_items):
        assert _titles(filter_media(sample_items, FilterSpec(favorites_only=True))) == [
            "The Expanse"
        ]

    def test_tags_are_anded(self, sample_items):
        both = FilterSpec(tag_ids={"tag-drama", "tag-scifi"})
        only_scifi = FilterSpec(tag_ids={"tag-scifi"})

        assert _titles(filter_media(sample_items, both)) == ["The Expanse"]
        assert _titles(filter_media(sample_items, only_scifi)) == ["The Expanse", "Arrival"]

    def test_rating_range_is_inclusive(self, sample_items):
        spec = FilterSpec(min_rating=6, max_rating=9)
        assert _titles(filter_media(sample_items, spec)) == ["The Expanse", "Arrival"]

    def test_unrated_excluded_once_lower_bound_raised(self, sample_items):
        spec = FilterSpec(min_rating=6, max_rating=10)
        assert "Mushishi" not in _titles(filter_media(sample_items, spec))

    def test_unrated_included_at_full_range(self, sample_items):
        spec = FilterSpec(min_rating=0, max_rating=10)
        assert "Mushishi" in _titles(filter_media(sample_items, spec))

    def test_unrated_included_when_only_upper_bound_lowered(self, sample_items):
        spec = FilterSpec(min_rating=0, max_rating=5)
        assert _titles(filter_media(sample_items, spec)) == ["Mushishi"]

    def test_criteria_combine(self, sample_items):
        spec = FilterSpec(media_type="series", tag_ids={"tag-scifi"}, min_rating=9.5)
        assert filter_media(sample_items, spec) == []


class TestFilteredView:
    """Tests for FilteredView."""

    @pytest.fixture
    def store(self, sample_items):
        return MediaStore(sample_items)

    def test_reflects_spec(self, store):
        view = FilteredView(store, FilterSpec(media_type="anime"))
        assert _titles(view.items) == ["Mushishi"]
        assert len(view) == 1

    def test_recomputes_after_store_change(self, store):
        view = FilteredView(store, FilterSpec(favorites_only=True))
        assert _titles(view.items) == ["The Expanse"]

        store.toggle_favorite("item-2")

        assert _titles(view.items) == ["The Expanse", "Arrival"]

    def test_sees_added_items(self, store):
        view = FilteredView(store, FilterSpec(media_type="movie"))
        assert len(view) == 1

        store.add_media(MediaDraft(type=MediaType.MOVIE, title="Dune"))

        assert _titles(view.items) == ["Arrival", "Dune"]

    def test_spec_change_recomputes(self, store):
        view = FilteredView(store)
        assert len(view) == 3

        view.spec = view.spec.with_changes(query="arr")

        assert _titles(view.items) == ["Arrival"]

    def test_close_stops_listening(self, store):
        view = FilteredView(store, FilterSpec(favorites_only=True))
        assert len(view) == 1
        view.close()

        store.toggle_favorite("item-2")

        assert len(view) == 1
