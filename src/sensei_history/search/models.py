"""Data models for conversation search."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..config import SNIPPET_LENGTH
from ..runtime import ensure_utc
from .matching import clamp_highlighted


class SearchFilters(BaseModel):
    """A search request. Unset filters match everything."""

    query: str = Field(default="", description="Free-text query, matched as a substring")
    message_type: str | None = Field(
        default=None,
        description="Message role to match: all, user or assistant"
    )
    system_type: str | None = Field(
        default=None,
        description="Exact system type of the parent conversation"
    )
    date_from: datetime | None = Field(default=None, description="Earliest message timestamp")
    date_to: datetime | None = Field(default=None, description="Latest message timestamp")
    starred: bool = Field(default=False, description="Only search starred conversations")
    folder_id: str | None = Field(
        default=None,
        description="Only search conversations in this folder ('none' = uncategorized)"
    )

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_bounds(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class SearchResult(BaseModel):
    """One matching message."""

    conversation_id: str
    conversation_title: str
    message_id: str
    message_role: str
    message_content: str
    system_type: str | None = None
    timestamp: datetime
    highlighted_content: str = Field(description="Content with every match wrapped in markers")
    match_spans: list[tuple[int, int]] = Field(
        default_factory=list,
        description="(start, end) offsets of each match in message_content"
    )

    def snippet(self, limit: int = SNIPPET_LENGTH) -> str:
        """Highlighted content clamped for display."""
        return clamp_highlighted(self.highlighted_content, limit)
