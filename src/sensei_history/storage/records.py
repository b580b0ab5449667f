"""JSON encoding of root records on top of a KeyValueStore."""

import json
import logging
from typing import Any

from ..errors import StorageUnavailableError
from .base import KeyValueStore

logger = logging.getLogger(__name__)


def read_record(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Read and decode a JSON root record.

    Args:
        store: Key-value store to read from
        key: Record key
        default: Value returned when the key is absent

    Returns:
        The decoded record, or default

    Raises:
        StorageUnavailableError: If the store fails or the payload is not JSON
    """
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Corrupt record under %s: %s", key, e)
        raise StorageUnavailableError(f"Record {key} is not valid JSON") from e


def write_record(store: KeyValueStore, key: str, value: Any) -> None:
    """Encode a root record as JSON and store it."""
    store.set(key, json.dumps(value, ensure_ascii=False))
