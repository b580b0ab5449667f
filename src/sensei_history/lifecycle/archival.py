"""Auto-archival of stale conversations.

Archival is a soft flag: the sweep never deletes anything and never
touches date_modified. Starred conversations are archived like any other;
"starred and archived" means important but inactive.
"""

import logging
from datetime import datetime, timedelta

from ..config import RETENTION_DAYS
from ..conversations import ConversationRepository
from ..runtime import Clock, ensure_utc, utc_now

logger = logging.getLogger(__name__)

RETENTION_WINDOW = timedelta(days=RETENTION_DAYS)


class ArchivalPolicy:
    """Archives conversations untouched for longer than the retention window."""

    def __init__(
        self,
        repository: ConversationRepository,
        retention: timedelta = RETENTION_WINDOW,
        clock: Clock = utc_now
    ):
        if retention <= timedelta(0):
            raise ValueError("retention must be positive")
        self._repository = repository
        self._retention = retention
        self._clock = clock

    def stale_ids(self, now: datetime | None = None) -> list[str]:
        """Ids of unarchived conversations last modified before the cutoff."""
        cutoff = ensure_utc(now or self._clock()) - self._retention
        return [
            c.id for c in self._repository.list_conversations()
            if not c.archived and c.date_modified < cutoff
        ]

    def run_sweep(self, now: datetime | None = None) -> int:
        """Archive every stale conversation in one write.

        Args:
            now: Reference instant (default: the policy's clock)

        Returns:
            Number of conversations archived by this sweep
        """
        archived = self._repository.archive_many(self.stale_ids(now))
        logger.info("Archival sweep archived %d conversation(s)", archived)
        return archived
