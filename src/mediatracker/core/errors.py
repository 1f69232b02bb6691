"""Exceptions raised by mediatracker operations."""

from __future__ import annotations


class MediaTrackerError(Exception):
    """Base class for user-facing mediatracker errors."""


class ImportValidationError(MediaTrackerError):
    """An import file is not a valid export; nothing was imported."""

    def __init__(self, message: str, index: int | None = None):
        super().__init__(message)
        self.index = index


class EmptySelectionError(MediaTrackerError):
    """An export was requested with no items selected."""


class InsufficientDataError(MediaTrackerError):
    """The collection is too small for statistics to be meaningful."""

    def __init__(self, count: int, minimum: int):
        super().__init__(
            f"Statistics need at least {minimum} items; the collection has {count}."
        )
        self.count = count
        self.minimum = minimum
