"""Derive a short conversation title from the first user message."""

from ..config import TITLE_MAX_LENGTH

QUESTION_STARTERS = (
    "Can you help me with ",
    "Can you help me ",
    "Can you tell me ",
    "Can you explain ",
    "I need help with ",
    "I have a question about ",
    "What is ",
    "What are ",
    "How do I ",
    "How can I ",
    "How to ",
    "Why is ",
    "Why does ",
    "Why do ",
)


def generate_conversation_title(first_message: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Turn a technician's opening message into a concise title.

    Drops one leading question starter ("How do I ", "What is ", ...) and
    shortens the rest to max_length, preferring a word boundary when one
    falls in the last 30% of the allowed length.

    Args:
        first_message: Text of the first user message
        max_length: Maximum title length before the ellipsis

    Returns:
        The derived title (may be empty if the message is blank)
    """
    cleaned = first_message.strip()

    lowered = cleaned.lower()
    for starter in QUESTION_STARTERS:
        if lowered.startswith(starter.lower()):
            cleaned = cleaned[len(starter):]
            cleaned = cleaned[:1].upper() + cleaned[1:]
            break

    if len(cleaned) <= max_length:
        return cleaned

    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.7:
        return truncated[:last_space] + "..."
    return truncated + "..."
