"""Cancellation-aware search requests.

A UI debounces keystrokes and only cares about the latest query. Each
submit() cancels the request still in flight and superseded requests
resolve to None (last request wins). The scan itself runs in a worker
thread so large histories do not block the event loop.
"""

import asyncio
import logging

from ..config import MIN_QUERY_LENGTH
from ..recent import RecentQueryLog
from .base import SearchEngine
from .models import SearchFilters, SearchResult

logger = logging.getLogger(__name__)


class SearchSession:
    """Serializes search requests from one UI session."""

    def __init__(self, engine: SearchEngine, recent: RecentQueryLog | None = None):
        self._engine = engine
        self._recent = recent
        self._generation = 0
        self._task: asyncio.Future | None = None

    async def submit(self, filters: SearchFilters) -> list[SearchResult] | None:
        """Run a search, superseding any request still in flight.

        Args:
            filters: Search request

        Returns:
            The results, or None if a newer request superseded this one
        """
        self._generation += 1
        generation = self._generation
        self._cancel_in_flight()

        task = asyncio.ensure_future(asyncio.to_thread(self._engine.search, filters))
        self._task = task
        try:
            results = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Search %r superseded by a newer request", filters.query)
                return None
            raise

        if generation != self._generation:
            logger.debug("Search %r superseded by a newer request", filters.query)
            return None

        if self._recent is not None and len(filters.query.strip()) >= MIN_QUERY_LENGTH:
            self._recent.record(filters.query)
        return results

    def cancel(self) -> None:
        """Abandon the request in flight, if any."""
        self._generation += 1
        self._cancel_in_flight()

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def _cancel_in_flight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
