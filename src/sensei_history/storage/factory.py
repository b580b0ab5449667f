"""Factory for creating key-value stores."""

from typing import Any

from .base import KeyValueStore


def create_key_value_store(backend: str = "memory", **kwargs: Any) -> KeyValueStore:
    """Create a key-value store.

    Args:
        backend: Backend type ("memory", "json" or "sqlite")
        **kwargs: Backend-specific configuration (e.g. path)

    Returns:
        KeyValueStore instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryKeyValueStore
        return InMemoryKeyValueStore(**kwargs)

    elif backend == "json":
        from .json_file import JsonFileKeyValueStore
        return JsonFileKeyValueStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteKeyValueStore
        return SQLiteKeyValueStore(**kwargs)

    raise ValueError(
        f"Unsupported store backend: {backend}. "
        f"Supported backends: memory, json, sqlite"
    )
