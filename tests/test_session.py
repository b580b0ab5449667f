"""Tests for the cancellation-aware search session."""
import asyncio
import threading

import pytest

from sensei_history.search import SearchEngine, SearchFilters, SearchSession


class GatedEngine(SearchEngine):
    """Engine whose first search blocks until released."""

    def __init__(self):
        self.release = threading.Event()
        self.calls: list[str] = []

    def search(self, filters):
        self.calls.append(filters.query)
        if len(self.calls) == 1:
            self.release.wait(timeout=5)
        return [filters.query]


class TestSearchSession:
    """Tests for SearchSession."""

    @pytest.mark.asyncio
    async def test_submit_returns_results_and_records_query(self, store, repository, add_message):
        conversation = repository.create()
        add_message(conversation.id, "user", "Condenser fan not spinning")
        session = store.search_session()

        results = await session.submit(SearchFilters(query=" condenser "))

        assert [r.conversation_id for r in results] == [conversation.id]
        assert store.recent_queries.entries() == ["condenser"]
        assert not session.busy

    @pytest.mark.asyncio
    async def test_short_query_not_recorded(self, store):
        session = store.search_session()
        assert await session.submit(SearchFilters(query="c")) == []
        assert store.recent_queries.entries() == []

    @pytest.mark.asyncio
    async def test_newer_request_supersedes_older(self):
        engine = GatedEngine()
        session = SearchSession(engine)

        first = asyncio.ensure_future(session.submit(SearchFilters(query="sup")))
        await asyncio.sleep(0.05)
        second = asyncio.ensure_future(session.submit(SearchFilters(query="superheat")))

        assert await first is None
        engine.release.set()
        assert await second == ["superheat"]

    @pytest.mark.asyncio
    async def test_cancel_abandons_request(self):
        engine = GatedEngine()
        session = SearchSession(engine)

        pending = asyncio.ensure_future(session.submit(SearchFilters(query="sup")))
        await asyncio.sleep(0.05)
        session.cancel()

        assert await pending is None
        engine.release.set()

    @pytest.mark.asyncio
    async def test_session_without_recent_log(self, store):
        session = store.search_session(record_queries=False)
        await session.submit(SearchFilters(query="superheat"))
        assert store.recent_queries.entries() == []
