"""Clock and identifier collaborators.

The repository and folder registry never call datetime.now() or uuid4()
directly; they receive these callables so tests can pin time and ids.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from uuid import uuid4

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    """Return the current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return a collision-free opaque identifier."""
    return str(uuid4())


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so all comparisons are well defined."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
