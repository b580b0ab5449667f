"""Data models for conversations.

Field names are snake_case in Python and camelCase when serialized, so the
persisted layout matches the records the chat front-end already writes.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config import DEFAULT_TITLE
from ..runtime import ensure_utc, new_id, utc_now


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Conversation(BaseModel):
    """A titled, ordered sequence of messages with organizational flags."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_TITLE
    title_pinned: bool = Field(
        default=False,
        description="True once the user renamed the conversation explicitly"
    )
    messages: list[Message] = Field(default_factory=list)
    date_created: datetime = Field(default_factory=utc_now)
    date_modified: datetime = Field(default_factory=utc_now)
    starred: bool = False
    archived: bool = False
    system_type: str | None = None
    diagnostic_id: str | None = None

    @field_validator("date_created", "date_modified")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def has_user_message(self) -> bool:
        return any(m.role == MessageRole.USER for m in self.messages)
