"""
Debounced metadata search.

Each submitted query cancels the pending lookup and starts a new timer.
Every lookup carries the generation number of the input that spawned it;
a response that arrives after newer input (including clearing the input)
is dropped instead of replacing the current results.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500
DEFAULT_DELAY = DEFAULT_DEBOUNCE_MS / 1000
MIN_QUERY_LENGTH = 3

T = TypeVar("T")


class SearchSession(Generic[T]):
    """Holds the suggestion list for one search input."""

    def __init__(
        self,
        search: Callable[[str], list[T]],
        on_results: Callable[[str, list[T]], None] | None = None,
        delay: float = DEFAULT_DELAY,
        min_length: int = MIN_QUERY_LENGTH,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        self._search = search
        self._on_results = on_results
        self.delay = delay
        self.min_length = min_length
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._generation = 0
        self._query = ""
        self._timer: Any = None
        self._settled = threading.Event()
        self._settled.set()
        self.results: list[T] = []

    @property
    def query(self) -> str:
        return self._query

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, query: str) -> int:
        """Record new input and schedule a lookup for it.

        Queries shorter than ``min_length`` clear the results immediately
        without calling the search function.

        Returns:
            The generation number assigned to this input
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._query = query
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._settled.clear()

        if len(query.strip()) < self.min_length:
            self._publish(generation, query, [])
            return generation

        timer = self._timer_factory(self.delay, self._run, args=(generation, query))
        timer.daemon = True
        with self._lock:
            if generation == self._generation:
                self._timer = timer
        timer.start()
        return generation

    def clear(self) -> None:
        """Empty the input; any pending or in-flight lookup becomes stale."""
        self.submit("")

    def _run(self, generation: int, query: str) -> None:
        try:
            results = self._search(query)
        except Exception:
            logger.warning("Metadata search failed for %r", query, exc_info=True)
            results = []
        self._publish(generation, query, results)

    def _publish(self, generation: int, query: str, results: list[T]) -> bool:
        with self._lock:
            if generation != self._generation or query != self._query:
                logger.debug("Discarding stale results for %r (generation %d)", query, generation)
                return False
            self.results = list(results)
            self._timer = None
            self._settled.set()

        if self._on_results is not None:
            self._on_results(query, list(results))
        return True

    def wait(self, timeout: float | None = None) -> list[T]:
        """Block until the latest input has results (or *timeout* passes)."""
        self._settled.wait(timeout)
        return list(self.results)
