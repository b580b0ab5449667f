"""Data model for user-defined folders."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import DEFAULT_FOLDER_COLOR
from ..runtime import new_id


class Folder(BaseModel):
    """A named grouping of conversation ids.

    A conversation id appears in at most one folder at a time.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    name: str
    color: str = DEFAULT_FOLDER_COLOR
    order: int = 0
    conversation_ids: list[str] = Field(default_factory=list)
