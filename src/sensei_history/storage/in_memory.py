"""In-memory key-value store.

Simple dict-based storage for session-only use and tests.
Data is lost when the process exits.
"""

from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    @property
    def backend_type(self) -> str:
        return "memory"
