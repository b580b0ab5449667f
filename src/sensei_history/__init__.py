"""
sensei_history: conversation storage, folders, search and archival for the
HVAC Sensei diagnostics assistant.

Each subpackage hides one design decision: how records are persisted
(storage), how conversations and folders are kept consistent
(conversations, folders), how messages are matched (search), and when
conversations go stale (lifecycle).
"""

__version__ = "0.1.0"

from .conversations import Conversation, ConversationRepository, Message, MessageRole
from .errors import (
    InvalidArgumentError,
    NotFoundError,
    SenseiHistoryError,
    StorageUnavailableError,
)
from .folders import NO_FOLDER, Folder, FolderRegistry
from .lifecycle import ArchivalPolicy
from .recent import RecentQueryLog
from .search import SearchEngine, SearchFilters, SearchResult, SearchSession
from .storage import KeyValueStore, create_key_value_store
from .store import ConversationStore, open_store

__all__ = [
    "ArchivalPolicy",
    "Conversation",
    "ConversationRepository",
    "ConversationStore",
    "Folder",
    "FolderRegistry",
    "InvalidArgumentError",
    "KeyValueStore",
    "Message",
    "MessageRole",
    "NO_FOLDER",
    "NotFoundError",
    "RecentQueryLog",
    "SearchEngine",
    "SearchFilters",
    "SearchResult",
    "SearchSession",
    "SenseiHistoryError",
    "StorageUnavailableError",
    "create_key_value_store",
    "open_store",
]
