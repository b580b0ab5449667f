"""Pytest configuration and shared fixtures."""
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from sensei_history.errors import StorageUnavailableError
from sensei_history.storage import InMemoryKeyValueStore
from sensei_history.store import open_store

START = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; time only moves when a test advances it."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class SequentialIds:
    """Id factory yielding id-0001, id-0002, ..."""

    def __init__(self, prefix: str = "id"):
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter):04d}"


class FlakyKeyValueStore(InMemoryKeyValueStore):
    """In-memory store whose writes can be made to fail per key."""

    def __init__(self):
        super().__init__()
        self.failing_keys: set[str] = set()

    def set(self, key: str, value: str) -> None:
        if key in self.failing_keys:
            raise StorageUnavailableError(f"Simulated write failure for {key}")
        super().set(key, value)

    def delete(self, key: str) -> bool:
        if key in self.failing_keys:
            raise StorageUnavailableError(f"Simulated delete failure for {key}")
        return super().delete(key)


@pytest.fixture
def clock():
    """Return a fake clock pinned at 2025-01-15 10:00 UTC."""
    return FakeClock()


@pytest.fixture
def ids():
    """Return a sequential id factory."""
    return SequentialIds()


@pytest.fixture
def kv():
    """Return a flaky in-memory key-value store (healthy by default)."""
    return FlakyKeyValueStore()


@pytest.fixture
def store(kv, clock, ids):
    """Return a conversation store over the in-memory kv fixture."""
    return open_store(kv_store=kv, clock=clock, id_factory=ids, auto_archive=False)


@pytest.fixture
def repository(store):
    return store.repository


@pytest.fixture
def folders(store):
    return store.folders


@pytest.fixture
def add_message(repository):
    """Append a message built from role and content; returns the Message."""
    def _add(conversation_id: str, role: str, content: str):
        message = repository.new_message(role, content)
        repository.append_message(conversation_id, message)
        return message
    return _add
