"""SQLite key-value store.

Provides persistent storage in a single-table SQLite database.
Uses the standard library sqlite3 driver; every write is its own transaction.
"""

import logging
import sqlite3
from pathlib import Path

from ..errors import StorageUnavailableError
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store."""

    def __init__(self, path: str | Path = "./sensei_history.db"):
        self._db_path = Path(path)
        self._connection: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the database and create the schema."""
        if self._connection is not None:
            return
        try:
            if str(self._db_path) != ":memory:":
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(str(self._db_path))
            self._create_schema()
        except (sqlite3.Error, OSError) as e:
            logger.error("Failed to open store database %s: %s", self._db_path, e)
            self._connection = None
            raise StorageUnavailableError(f"Cannot open {self._db_path}: {e}") from e

    def _create_schema(self) -> None:
        with self._connection:
            self._connection.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def get(self, key: str) -> str | None:
        try:
            row = self._conn().execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Failed to read key %s: %s", key, e)
            raise StorageUnavailableError(f"Cannot read {key}: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._conn() as conn:
                conn.execute("""
                    INSERT INTO kv_store (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """, (key, value))
        except sqlite3.Error as e:
            logger.error("Failed to write key %s: %s", key, e)
            raise StorageUnavailableError(f"Cannot write {key}: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            with self._conn() as conn:
                cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as e:
            logger.error("Failed to delete key %s: %s", key, e)
            raise StorageUnavailableError(f"Cannot delete {key}: {e}") from e
        return cursor.rowcount > 0

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _conn(self) -> sqlite3.Connection:
        if self._connection is None:
            self.connect()
        return self._connection
