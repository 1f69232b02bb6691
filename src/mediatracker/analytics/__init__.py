"""
Analytics module for collection statistics.

Provides aggregated statistics over the media collection and its tags.
"""

from mediatracker.analytics.aggregator import (
    MIN_ITEMS_FOR_STATS,
    Bucket,
    CollectionStats,
    CompletionEntry,
    RatedEntry,
    SeasonRatingTally,
    TagStats,
    TimelineEntry,
)

__all__ = [
    "MIN_ITEMS_FOR_STATS",
    "CollectionStats",
    "Bucket",
    "TagStats",
    "SeasonRatingTally",
    "TimelineEntry",
    "RatedEntry",
    "CompletionEntry",
]
