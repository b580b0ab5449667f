"""Conversation repository.

Owns the durable record of conversations and their messages. Every other
component reads and mutates conversations through this class.

Mutations are staged on copies and committed to memory only after the
key-value store accepted the write, so a storage failure never leaves a
half-applied change visible to callers.
"""

import logging
from collections.abc import Callable, Iterable

from pydantic import ValidationError

from ..config import CONVERSATIONS_KEY, CURRENT_CONVERSATION_KEY
from ..errors import InvalidArgumentError, NotFoundError
from ..runtime import Clock, IdFactory, new_id, utc_now
from ..storage import KeyValueStore
from ..storage.records import read_record, write_record
from .models import Conversation, Message, MessageRole
from .titles import generate_conversation_title

logger = logging.getLogger(__name__)

DeleteListener = Callable[[str], None]


class ConversationRepository:
    """Durable store of conversations backed by a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id
    ):
        """Load persisted conversations.

        Args:
            store: Key-value substrate holding the conversation root record
            clock: Source of "now" for creation and modification dates
            id_factory: Generator for conversation and message ids

        Raises:
            StorageUnavailableError: If the root record cannot be read
        """
        self._store = store
        self._clock = clock
        self._new_id = id_factory
        self._delete_listeners: list[DeleteListener] = []
        self._conversations = self._load()
        self._current_id: str | None = read_record(store, CURRENT_CONVERSATION_KEY)

    # ── Queries ──────────────────────────────────────────────────────

    def get(self, conversation_id: str) -> Conversation:
        """Return a copy of a conversation.

        Raises:
            NotFoundError: If no conversation has this id
        """
        return self._require(conversation_id).model_copy(deep=True)

    def exists(self, conversation_id: str) -> bool:
        return conversation_id in self._conversations

    def list_conversations(self) -> list[Conversation]:
        """Return copies of all conversations, in no particular order."""
        return [c.model_copy(deep=True) for c in self._conversations.values()]

    def list_recent(self) -> list[Conversation]:
        """Return all conversations, most recently modified first."""
        return sort_by_recency(self.list_conversations())

    def ids(self) -> set[str]:
        return set(self._conversations)

    def __len__(self) -> int:
        return len(self._conversations)

    # ── Mutations ────────────────────────────────────────────────────

    def create(
        self,
        system_type: str | None = None,
        diagnostic_id: str | None = None
    ) -> Conversation:
        """Create an empty conversation.

        Args:
            system_type: Optional HVAC system type the conversation is about
            diagnostic_id: Optional id of the diagnostic that spawned it

        Returns:
            The new conversation
        """
        now = self._clock()
        conversation = Conversation(
            id=self._new_id(),
            date_created=now,
            date_modified=now,
            system_type=system_type,
            diagnostic_id=diagnostic_id,
        )
        staged = dict(self._conversations)
        staged[conversation.id] = conversation
        self._commit(staged)
        logger.debug("Created conversation %s", conversation.id)
        return conversation.model_copy(deep=True)

    def new_message(self, role: MessageRole | str, content: str) -> Message:
        """Build a message stamped with this repository's clock and id factory."""
        return Message(
            id=self._new_id(),
            role=MessageRole(role),
            content=content,
            timestamp=self._clock(),
        )

    def append_message(self, conversation_id: str, message: Message) -> Conversation:
        """Append a message and bump the modification date.

        The first user message also derives the title, unless the
        conversation was renamed explicitly.

        Args:
            conversation_id: Target conversation
            message: Message to append

        Returns:
            The updated conversation

        Raises:
            NotFoundError: If no conversation has this id
        """
        conversation = self._require(conversation_id).model_copy(deep=True)

        if (
            message.role == MessageRole.USER
            and not conversation.title_pinned
            and not conversation.has_user_message()
        ):
            derived = generate_conversation_title(message.content)
            if derived:
                conversation.title = derived

        conversation.messages.append(message)
        conversation.date_modified = self._clock()
        self._replace(conversation)
        return conversation.model_copy(deep=True)

    def rename(self, conversation_id: str, new_title: str) -> Conversation:
        """Set an explicit title.

        Raises:
            NotFoundError: If no conversation has this id
            InvalidArgumentError: If the title is blank
        """
        conversation = self._require(conversation_id).model_copy(deep=True)
        title = new_title.strip()
        if not title:
            raise InvalidArgumentError("Conversation title cannot be empty")

        conversation.title = title
        conversation.title_pinned = True
        conversation.date_modified = self._clock()
        self._replace(conversation)
        return conversation.model_copy(deep=True)

    def toggle_star(self, conversation_id: str) -> bool:
        """Flip the starred flag. Does not touch date_modified.

        Returns:
            The new starred value

        Raises:
            NotFoundError: If no conversation has this id
        """
        conversation = self._require(conversation_id).model_copy(deep=True)
        conversation.starred = not conversation.starred
        self._replace(conversation)
        return conversation.starred

    def set_archived(self, conversation_id: str, archived: bool) -> None:
        """Set the archived flag. Does not touch date_modified.

        Raises:
            NotFoundError: If no conversation has this id
        """
        conversation = self._require(conversation_id).model_copy(deep=True)
        conversation.archived = archived
        self._replace(conversation)

    def archive_many(self, conversation_ids: Iterable[str]) -> int:
        """Archive several conversations in a single write.

        Unknown and already-archived ids are ignored.

        Returns:
            Number of conversations whose flag changed
        """
        staged = dict(self._conversations)
        changed = 0
        for conversation_id in conversation_ids:
            current = staged.get(conversation_id)
            if current is None or current.archived:
                continue
            staged[conversation_id] = current.model_copy(update={"archived": True}, deep=True)
            changed += 1

        if changed:
            self._commit(staged)
        return changed

    def delete(self, conversation_id: str) -> None:
        """Delete a conversation and purge it from every folder.

        Delete listeners (the folder registry) run first, then the
        current-conversation pointer is cleared. If any of these writes
        fails the conversation is left untouched, so an error always
        means the conversation still exists.

        Raises:
            NotFoundError: If no conversation has this id
            StorageUnavailableError: If the store rejects a write
        """
        self._require(conversation_id)

        for listener in self._delete_listeners:
            listener(conversation_id)

        if self._current_id == conversation_id:
            self.clear_current()

        staged = dict(self._conversations)
        del staged[conversation_id]
        self._commit(staged)
        logger.debug("Deleted conversation %s", conversation_id)

    def add_delete_listener(self, listener: DeleteListener) -> None:
        """Register a callback invoked with the id before a conversation is removed."""
        self._delete_listeners.append(listener)

    # ── Current conversation ─────────────────────────────────────────

    def set_current(self, conversation_id: str) -> None:
        """Remember which conversation the UI has open.

        Raises:
            NotFoundError: If no conversation has this id
        """
        self._require(conversation_id)
        write_record(self._store, CURRENT_CONVERSATION_KEY, conversation_id)
        self._current_id = conversation_id

    def current(self) -> Conversation | None:
        """Return the open conversation, if it still exists."""
        if self._current_id is None or self._current_id not in self._conversations:
            return None
        return self.get(self._current_id)

    def clear_current(self) -> None:
        self._store.delete(CURRENT_CONVERSATION_KEY)
        self._current_id = None

    # ── Private helpers ──────────────────────────────────────────────

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError("conversation", conversation_id)
        return conversation

    def _replace(self, conversation: Conversation) -> None:
        staged = dict(self._conversations)
        staged[conversation.id] = conversation
        self._commit(staged)

    def _commit(self, staged: dict[str, Conversation]) -> None:
        payload = [c.model_dump(mode="json", by_alias=True) for c in staged.values()]
        write_record(self._store, CONVERSATIONS_KEY, payload)
        self._conversations = staged

    def _load(self) -> dict[str, Conversation]:
        raw = read_record(self._store, CONVERSATIONS_KEY, default=[])
        conversations: dict[str, Conversation] = {}
        for item in raw if isinstance(raw, list) else []:
            try:
                conversation = Conversation.model_validate(item)
            except ValidationError as e:
                logger.warning("Skipping malformed conversation record: %s", e)
                continue
            conversations[conversation.id] = conversation
        return conversations


def sort_by_recency(conversations: list[Conversation]) -> list[Conversation]:
    """Sort conversations by date_modified descending, ties by id."""
    ordered = sorted(conversations, key=lambda c: c.id)
    ordered.sort(key=lambda c: c.date_modified, reverse=True)
    return ordered
