"""Wiring of the conversation components over one key-value store.

Each store instance is owned by exactly one UI session; nothing here is
shared across processes or threads.
"""

import logging
from datetime import timedelta
from typing import Any

from .config import RETENTION_DAYS
from .conversations import ConversationRepository
from .folders import FolderRegistry
from .lifecycle import ArchivalPolicy
from .recent import RecentQueryLog
from .runtime import Clock, IdFactory, new_id, utc_now
from .search import (
    MatchPredicate,
    SearchEngine,
    SearchFilters,
    SearchResult,
    SearchSession,
    create_search_engine,
)
from .storage import KeyValueStore, create_key_value_store

logger = logging.getLogger(__name__)


class ConversationStore:
    """Repository, folders, search, archival and recent queries for one session."""

    def __init__(
        self,
        kv_store: KeyValueStore,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
        retention_days: int = RETENTION_DAYS,
        matcher: MatchPredicate | None = None
    ):
        self.kv_store = kv_store
        self.repository = ConversationRepository(kv_store, clock=clock, id_factory=id_factory)
        self.folders = FolderRegistry(self.repository, kv_store, id_factory=id_factory)
        self.search_engine: SearchEngine = create_search_engine(
            self.repository, self.folders, matcher=matcher
        )
        self.archival = ArchivalPolicy(
            self.repository, retention=timedelta(days=retention_days), clock=clock
        )
        self.recent_queries = RecentQueryLog(kv_store)

    def search(self, filters: SearchFilters) -> list[SearchResult]:
        """Shortcut for search_engine.search()."""
        return self.search_engine.search(filters)

    def search_session(self, record_queries: bool = True) -> SearchSession:
        """Create a last-request-wins search session for a UI."""
        recent = self.recent_queries if record_queries else None
        return SearchSession(self.search_engine, recent=recent)

    def close(self) -> None:
        self.kv_store.close()

    def __enter__(self) -> "ConversationStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_store(
    kv_store: KeyValueStore | None = None,
    backend: str = "memory",
    clock: Clock = utc_now,
    id_factory: IdFactory = new_id,
    retention_days: int = RETENTION_DAYS,
    auto_archive: bool = True,
    matcher: MatchPredicate | None = None,
    **backend_config: Any
) -> ConversationStore:
    """Open a conversation store.

    Args:
        kv_store: Existing key-value store (overrides backend)
        backend: Backend type for a new store ("memory", "json", "sqlite")
        clock: Source of "now"
        id_factory: Generator for opaque ids
        retention_days: Archival retention window in days
        auto_archive: Run one archival sweep after loading
        matcher: Optional search match predicate (default: substring)
        **backend_config: Backend-specific configuration (e.g. path)

    Returns:
        Ready-to-use ConversationStore

    Raises:
        StorageUnavailableError: If the store cannot be opened or read
        ValueError: If backend type is not supported

    Example:
        >>> store = open_store(backend="json", path="./history.json")
        >>> conversation = store.repository.create(system_type="heat-pump")
    """
    if kv_store is None:
        kv_store = create_key_value_store(backend, **backend_config)
    kv_store.connect()

    try:
        store = ConversationStore(
            kv_store,
            clock=clock,
            id_factory=id_factory,
            retention_days=retention_days,
            matcher=matcher,
        )
        if auto_archive:
            store.archival.run_sweep()
    except Exception:
        kv_store.close()
        raise
    logger.debug(
        "Opened %s store with %d conversation(s)",
        kv_store.backend_type,
        len(store.repository),
    )
    return store
