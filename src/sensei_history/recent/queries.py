"""Recent search queries, most recent first."""

import logging

from ..config import RECENT_QUERY_LIMIT, RECENT_SEARCHES_KEY
from ..storage import KeyValueStore
from ..storage.records import read_record, write_record

logger = logging.getLogger(__name__)


class RecentQueryLog:
    """Bounded, de-duplicated log of past search strings."""

    def __init__(self, store: KeyValueStore, limit: int = RECENT_QUERY_LIMIT):
        self._store = store
        self._limit = limit
        self._entries = self._load()

    def record(self, query: str) -> None:
        """Push a query to the front, dropping any earlier copy of it.

        Blank queries are ignored. Duplicates are compared case-sensitively
        after trimming.
        """
        trimmed = query.strip()
        if not trimmed:
            return
        entries = [trimmed] + [q for q in self._entries if q != trimmed]
        entries = entries[:self._limit]
        write_record(self._store, RECENT_SEARCHES_KEY, entries)
        self._entries = entries

    def entries(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> None:
        write_record(self._store, RECENT_SEARCHES_KEY, [])
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self) -> list[str]:
        raw = read_record(self._store, RECENT_SEARCHES_KEY, default=[])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed recent-search record")
            return []
        return [q for q in raw if isinstance(q, str)][:self._limit]
