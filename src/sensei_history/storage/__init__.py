"""Key-value substrate for sensei_history."""

from .base import KeyValueStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore
from .json_file import JsonFileKeyValueStore
from .sqlite import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SQLiteKeyValueStore",
    "create_key_value_store",
]
