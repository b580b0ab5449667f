"""JSON file key-value store.

Keeps every key in a single JSON object on disk, the closest local analogue
of a browser's localStorage. Writes go to a temporary file that is then
renamed over the original, so a crash never leaves a truncated file behind.
"""

import json
import logging
import os
from pathlib import Path

from ..errors import StorageUnavailableError
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store persisted as one JSON document."""

    def __init__(self, path: str | Path = "./sensei_history.json"):
        self._path = Path(path)
        self._data: dict[str, str] | None = None

    def connect(self) -> None:
        """Load the file into memory, creating parent directories as needed."""
        self._data = self._read_file()

    def close(self) -> None:
        self._data = None

    def get(self, key: str) -> str | None:
        return self._loaded().get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._loaded())
        data[key] = value
        self._write_file(data)
        self._data = data

    def delete(self, key: str) -> bool:
        data = dict(self._loaded())
        if key not in data:
            return False
        del data[key]
        self._write_file(data)
        self._data = data
        return True

    @property
    def backend_type(self) -> str:
        return "json"

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────────

    def _loaded(self) -> dict[str, str]:
        if self._data is None:
            self._data = self._read_file()
        return self._data

    def _read_file(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to read store file %s: %s", self._path, e)
            raise StorageUnavailableError(f"Cannot read {self._path}: {e}") from e

        if not isinstance(raw, dict):
            raise StorageUnavailableError(f"Store file {self._path} is not a JSON object")
        data = {}
        for key, value in raw.items():
            if not isinstance(value, str):
                logger.warning("Skipping non-string value for key %s in %s", key, self._path)
                continue
            data[str(key)] = value
        return data

    def _write_file(self, data: dict[str, str]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            logger.error("Failed to write store file %s: %s", self._path, e)
            raise StorageUnavailableError(f"Cannot write {self._path}: {e}") from e
