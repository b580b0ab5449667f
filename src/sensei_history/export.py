"""Export conversations to Markdown, plain text and JSON."""

import json

from .conversations import Conversation, MessageRole

ROLE_LABELS = {
    MessageRole.USER: "Technician",
    MessageRole.ASSISTANT: "Sensei AI",
}


def conversation_to_markdown(conversation: Conversation) -> str:
    """Export a conversation as Markdown."""
    lines = [f"# {conversation.title}", ""]
    lines.append(f"**Date:** {conversation.date_created.strftime('%Y-%m-%d')}")
    if conversation.system_type:
        lines.append(f"**System Type:** {conversation.system_type}")
    if conversation.diagnostic_id:
        lines.append(f"**Diagnostic ID:** {conversation.diagnostic_id}")
    lines.extend(["", "---", ""])

    for msg in conversation.messages:
        ts = msg.timestamp.strftime("%Y-%m-%d %H:%M")
        lines.append(f"## {ROLE_LABELS[msg.role]} ({ts})")
        lines.append("")
        lines.append(msg.content)
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def conversation_to_text(conversation: Conversation) -> str:
    """Export a conversation as plain text."""
    rule = "=" * 60
    lines = [conversation.title, ""]
    lines.append(f"Date: {conversation.date_created.strftime('%Y-%m-%d')}")
    if conversation.system_type:
        lines.append(f"System Type: {conversation.system_type}")
    if conversation.diagnostic_id:
        lines.append(f"Diagnostic ID: {conversation.diagnostic_id}")
    lines.extend(["", rule, ""])

    for index, msg in enumerate(conversation.messages):
        lines.append(f"[{msg.timestamp.strftime('%H:%M')}] {ROLE_LABELS[msg.role]}:")
        lines.append(msg.content)
        lines.append("")
        if index < len(conversation.messages) - 1:
            lines.extend(["-" * 60, ""])

    lines.append(rule)
    return "\n".join(lines)


def conversation_to_json(conversation: Conversation) -> str:
    """Export a conversation as structured JSON (persisted field names)."""
    return json.dumps(
        conversation.model_dump(mode="json", by_alias=True, exclude={"title_pinned"}),
        indent=2,
        ensure_ascii=False,
    )
