"""
TMDB metadata lookup.

Searches The Movie Database by title and fetches details used to pre-fill
a new media item. Every failure is logged and turned into an empty result
so adding an item by hand keeps working without the service.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

from mediatracker.core.models import MediaDraft, MediaType, build_seasons

logger = logging.getLogger(__name__)

BASE_URL = "https://api.themoviedb.org/3"
IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1526374965328-7f61d4dc18c5"
DEFAULT_LANGUAGE = "en-US"
SEARCHABLE_TYPES = ("movie", "tv")


def image_url(path: str | None, size: str = "w500") -> str:
    """Full poster URL for a TMDB image path, or a placeholder."""
    if not path:
        return PLACEHOLDER_IMAGE
    return f"{IMAGE_BASE_URL}/{size}{path}"


def to_half_steps(vote: float | None) -> float | None:
    """Round a TMDB vote average to the collection's 0.5 rating steps."""
    if not vote:
        return None
    return min(10.0, max(0.0, round(float(vote) * 2) / 2))


@dataclass
class SearchResult:
    """One movie or TV show from a multi search."""

    id: int
    title: str
    media_type: str  # "movie" or "tv"
    overview: str = ""
    poster_path: str | None = None
    release_date: str | None = None
    vote_average: float = 0.0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SearchResult:
        # Movies carry title/release_date, TV shows name/first_air_date
        return cls(
            id=int(data["id"]),
            title=data.get("title") or data.get("name") or "",
            media_type=data["media_type"],
            overview=data.get("overview") or "",
            poster_path=data.get("poster_path"),
            release_date=data.get("release_date") or data.get("first_air_date"),
            vote_average=float(data.get("vote_average") or 0.0),
        )

    @property
    def year(self) -> str:
        return (self.release_date or "")[:4]


@dataclass
class MediaDetails:
    """Details of a single movie or TV show."""

    id: int
    title: str
    overview: str = ""
    poster_path: str | None = None
    vote_average: float = 0.0
    number_of_seasons: int | None = None
    in_production: bool | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> MediaDetails:
        return cls(
            id=int(data["id"]),
            title=data.get("name") or data.get("title") or "",
            overview=data.get("overview") or "",
            poster_path=data.get("poster_path"),
            vote_average=float(data.get("vote_average") or 0.0),
            number_of_seasons=data.get("number_of_seasons"),
            in_production=data.get("in_production"),
        )


class TMDBClient:
    """Minimal TMDB v3 client authenticated with a bearer token."""

    def __init__(
        self,
        token: str | None = None,
        language: str = DEFAULT_LANGUAGE,
        session: requests.Session | None = None,
        timeout: int = 10,
    ):
        self.token = token or os.environ.get("TMDB_TOKEN")
        self.language = language
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.token)

    def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """GET a TMDB endpoint.

        Returns:
            Parsed JSON, or None on any error
        """
        if not self.token:
            logger.debug("TMDB token not configured; skipping %s", endpoint)
            return None

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }
        query = {"language": self.language, **(params or {})}
        try:
            response = self.session.get(
                f"{BASE_URL}{endpoint}",
                params=query,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError):
            logger.debug("TMDB request failed: %s", endpoint, exc_info=True)
            return None

        if not isinstance(data, dict):
            logger.debug("Unexpected TMDB payload for %s", endpoint)
            return None
        return data

    def search(self, query: str) -> list[SearchResult]:
        """Search movies and TV shows by title.

        Blank queries return no results without calling the service.
        """
        if not query or not query.strip():
            return []

        data = self._get("/search/multi", {"query": query, "include_adult": "false"})
        if data is None:
            return []

        results = []
        for entry in data.get("results", []):
            if entry.get("media_type") not in SEARCHABLE_TYPES:
                continue
            try:
                results.append(SearchResult.from_api(entry))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed TMDB result: %r", entry)
        return results

    def get_details(self, tmdb_id: int, media_type: str) -> MediaDetails | None:
        """Fetch details for a movie or TV show, or None if unavailable."""
        if media_type not in SEARCHABLE_TYPES:
            raise ValueError(f"media_type must be 'movie' or 'tv', got {media_type!r}")

        data = self._get(f"/{media_type}/{tmdb_id}")
        if data is None:
            return None
        try:
            return MediaDetails.from_api(data)
        except (KeyError, TypeError, ValueError):
            logger.debug("Malformed TMDB details for %s/%s", media_type, tmdb_id)
            return None


def draft_from_details(
    details: MediaDetails,
    kind: str,
    media_type: MediaType | None = None,
) -> MediaDraft:
    """Pre-fill a new media item from fetched details.

    *kind* is the TMDB kind ("tv" or "movie"). TV shows become series unless
    *media_type* says otherwise; movies always get a single season.
    """
    if kind == "tv":
        return MediaDraft(
            type=media_type or MediaType.SERIES,
            title=details.title,
            description=details.overview,
            image_url=image_url(details.poster_path),
            rating=to_half_steps(details.vote_average),
            in_emission=bool(details.in_production),
            seasons=build_seasons(details.number_of_seasons or 1),
        )
    return MediaDraft(
        type=MediaType.MOVIE,
        title=details.title,
        description=details.overview,
        image_url=image_url(details.poster_path),
        rating=to_half_steps(details.vote_average),
        in_emission=False,
        seasons=build_seasons(1),
    )


def draft_from_result(
    client: TMDBClient,
    result: SearchResult,
    media_type: MediaType | None = None,
) -> MediaDraft | None:
    """Pre-fill a new media item from a search result.

    TV shows fetch their details for season count and airing status and
    default to series (pass ``media_type=MediaType.ANIME`` to override).
    Movies get a single synthetic season.

    Returns:
        A draft, or None when TV details could not be fetched
    """
    if result.media_type == "tv":
        details = client.get_details(result.id, "tv")
        if details is None:
            return None
        return draft_from_details(details, "tv", media_type)

    return MediaDraft(
        type=MediaType.MOVIE,
        title=result.title,
        description=result.overview,
        image_url=image_url(result.poster_path),
        rating=to_half_steps(result.vote_average),
        in_emission=False,
        seasons=build_seasons(1),
    )
