"""Conversation repository module for sensei_history.

Persists chat conversations and their append-only message history.
"""

from .models import Conversation, Message, MessageRole
from .repository import ConversationRepository, sort_by_recency
from .titles import generate_conversation_title

__all__ = [
    "Conversation",
    "ConversationRepository",
    "Message",
    "MessageRole",
    "generate_conversation_title",
    "sort_by_recency",
]
