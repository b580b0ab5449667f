"""Recent-query log for sensei_history."""

from .queries import RecentQueryLog

__all__ = ["RecentQueryLog"]
