"""Abstract base class for key-value substrates.

This module defines the persistence primitive every other component sits on.
The abstraction hides:
- Storage medium (process memory, JSON file, SQLite database)
- Encoding of the payload on disk
- Connection management
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Synchronous string key-value store.

    Values are opaque string payloads; callers own their encoding.
    Implementations raise StorageUnavailableError when the medium fails,
    never returning a partial or default value for a failed read.
    """

    def connect(self) -> None:
        """Open the underlying medium. No-op unless the backend needs it."""

    def close(self) -> None:
        """Release the underlying medium. No-op unless the backend needs it."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Read the payload stored under a key.

        Args:
            key: Record key

        Returns:
            The stored payload, or None if the key is absent

        Raises:
            StorageUnavailableError: If the medium cannot be read
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a payload under a key, replacing any previous value.

        Args:
            key: Record key
            value: Payload to store

        Raises:
            StorageUnavailableError: If the medium cannot be written
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Args:
            key: Record key

        Returns:
            True if the key existed, False otherwise

        Raises:
            StorageUnavailableError: If the medium cannot be written
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    def __enter__(self) -> "KeyValueStore":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
