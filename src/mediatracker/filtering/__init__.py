"""Filtering of the media collection."""

from mediatracker.filtering.engine import FilteredView, FilterSpec, filter_media

__all__ = [
    "FilterSpec",
    "FilteredView",
    "filter_media",
]
