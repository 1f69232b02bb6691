"""External metadata lookup (TMDB) used to pre-fill new media items."""

from mediatracker.metadata.search import SearchSession
from mediatracker.metadata.tmdb import (
    MediaDetails,
    SearchResult,
    TMDBClient,
    draft_from_details,
    draft_from_result,
    image_url,
)

__all__ = [
    "SearchSession",
    "TMDBClient",
    "SearchResult",
    "MediaDetails",
    "draft_from_details",
    "draft_from_result",
    "image_url",
]
