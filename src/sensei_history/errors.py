"""Typed errors raised by sensei_history.

Every failure the library surfaces to callers derives from SenseiHistoryError,
so a UI layer can catch one base class and still discriminate by type.
"""


class SenseiHistoryError(Exception):
    """Base class for all sensei_history errors."""


class NotFoundError(SenseiHistoryError, LookupError):
    """An operation referenced a conversation or folder that does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"Unknown {kind}: {identifier}")


class InvalidArgumentError(SenseiHistoryError, ValueError):
    """An argument failed validation (blank name, inverted date bounds, ...)."""


class StorageUnavailableError(SenseiHistoryError, RuntimeError):
    """The key-value substrate failed to read or write."""
