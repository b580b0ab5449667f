"""Configuration constants.

Centralizes the retention window, query limits, highlight markers and
storage key names used across the library.
"""

# Lifecycle
RETENTION_DAYS = 90  # Days without modification before a conversation is archived

# Search
MIN_QUERY_LENGTH = 2  # Trimmed queries shorter than this return no results
SNIPPET_LENGTH = 240  # Characters of highlighted content shown in result lists
HIGHLIGHT_OPEN = "<mark>"
HIGHLIGHT_CLOSE = "</mark>"

# Recent searches
RECENT_QUERY_LIMIT = 10

# Conversations
DEFAULT_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 60

# Folders
DEFAULT_FOLDER_COLOR = "#3b82f6"
NO_FOLDER = "none"  # Move target / search filter meaning "uncategorized"

# Storage keys
CONVERSATIONS_KEY = "hvac_chat_conversations"
FOLDERS_KEY = "hvac_chat_folders"
RECENT_SEARCHES_KEY = "hvac_chat_recent_searches"
CURRENT_CONVERSATION_KEY = "hvac_chat_current_conversation"

# Storage backends
STORE_BACKENDS = ("memory", "json", "sqlite")
DEFAULT_STORE_BACKEND = "json"
DEFAULT_JSON_PATH = "./sensei_history.json"
DEFAULT_SQLITE_PATH = "./sensei_history.db"
