"""Folder registry.

Owns named groupings of conversation ids. Conversation content stays in the
repository; the registry only stores ids and asks the repository whether an
id exists. "Uncategorized" is never stored: it is computed as the set of
conversations referenced by no folder.
"""

import logging

from pydantic import ValidationError

from ..config import DEFAULT_FOLDER_COLOR, FOLDERS_KEY, NO_FOLDER
from ..conversations import Conversation, ConversationRepository, sort_by_recency
from ..errors import InvalidArgumentError, NotFoundError
from ..runtime import IdFactory, new_id
from ..storage import KeyValueStore
from ..storage.records import read_record, write_record
from .models import Folder

logger = logging.getLogger(__name__)


class FolderRegistry:
    """Single-membership folders over a ConversationRepository."""

    def __init__(
        self,
        repository: ConversationRepository,
        store: KeyValueStore,
        id_factory: IdFactory = new_id
    ):
        """Load persisted folders and subscribe to conversation deletes.

        Args:
            repository: Repository used to validate and resolve conversation ids
            store: Key-value substrate holding the folder root record
            id_factory: Generator for folder ids
        """
        self._repository = repository
        self._store = store
        self._new_id = id_factory
        self._folders = self._load()
        repository.add_delete_listener(self.on_conversation_deleted)

    # ── Folder lifecycle ─────────────────────────────────────────────

    def create_folder(self, name: str, color: str = DEFAULT_FOLDER_COLOR) -> Folder:
        """Create an empty folder.

        Raises:
            InvalidArgumentError: If the name is blank
        """
        clean_name = _clean_name(name)
        order = max((f.order for f in self._folders.values()), default=0) + 1
        folder = Folder(id=self._new_id(), name=clean_name, color=color, order=order)

        staged = self._staged()
        staged[folder.id] = folder
        self._commit(staged)
        return folder.model_copy(deep=True)

    def rename_folder(self, folder_id: str, name: str) -> Folder:
        """Rename a folder.

        Raises:
            NotFoundError: If no folder has this id
            InvalidArgumentError: If the name is blank
        """
        self._require(folder_id)
        clean_name = _clean_name(name)
        staged = self._staged()
        staged[folder_id].name = clean_name
        self._commit(staged)
        return staged[folder_id].model_copy(deep=True)

    def delete_folder(self, folder_id: str) -> None:
        """Delete a folder. Its conversations become uncategorized.

        Raises:
            NotFoundError: If no folder has this id
        """
        self._require(folder_id)
        staged = self._staged()
        del staged[folder_id]
        self._commit(staged)

    def get_folder(self, folder_id: str) -> Folder:
        """Return a copy of a folder.

        Raises:
            NotFoundError: If no folder has this id
        """
        return self._require(folder_id).model_copy(deep=True)

    def list_folders(self) -> list[Folder]:
        """Return all folders in display order."""
        folders = [f.model_copy(deep=True) for f in self._folders.values()]
        return sorted(folders, key=lambda f: (f.order, f.name))

    # ── Membership ───────────────────────────────────────────────────

    def move_conversation(self, conversation_id: str, target_folder_id: str) -> Folder | None:
        """Move a conversation into a folder, removing it from all others.

        Args:
            conversation_id: Conversation to move
            target_folder_id: Destination folder, or NO_FOLDER to uncategorize

        Returns:
            The destination folder, or None when uncategorized

        Raises:
            NotFoundError: If the conversation or the target folder does not exist
        """
        if target_folder_id != NO_FOLDER:
            self._require(target_folder_id)
        if not self._repository.exists(conversation_id):
            raise NotFoundError("conversation", conversation_id)

        staged = self._staged()
        for folder in staged.values():
            if conversation_id in folder.conversation_ids:
                folder.conversation_ids = [
                    cid for cid in folder.conversation_ids if cid != conversation_id
                ]

        if target_folder_id == NO_FOLDER:
            self._commit(staged)
            return None

        staged[target_folder_id].conversation_ids.append(conversation_id)
        self._commit(staged)
        return staged[target_folder_id].model_copy(deep=True)

    def folder_of(self, conversation_id: str) -> Folder | None:
        """Return the folder holding a conversation, if any."""
        for folder in self._folders.values():
            if conversation_id in folder.conversation_ids:
                return folder.model_copy(deep=True)
        return None

    def conversations_in(self, folder_id: str) -> list[Conversation]:
        """Resolve a folder's conversations, most recently modified first.

        Ids that no longer resolve are skipped and logged rather than raised.

        Raises:
            NotFoundError: If no folder has this id
        """
        folder = self._require(folder_id)
        conversations = []
        for conversation_id in folder.conversation_ids:
            try:
                conversations.append(self._repository.get(conversation_id))
            except NotFoundError:
                logger.warning(
                    "Folder %s references missing conversation %s; skipping",
                    folder_id,
                    conversation_id,
                )
        return sort_by_recency(conversations)

    def uncategorized(self) -> list[Conversation]:
        """Return conversations referenced by no folder, most recent first."""
        filed = self.filed_ids()
        return sort_by_recency([
            c for c in self._repository.list_conversations() if c.id not in filed
        ])

    def filed_ids(self) -> set[str]:
        """Return every conversation id referenced by some folder."""
        return {cid for f in self._folders.values() for cid in f.conversation_ids}

    def on_conversation_deleted(self, conversation_id: str) -> None:
        """Purge a conversation id from every folder. Idempotent."""
        if conversation_id not in self.filed_ids():
            return

        staged = self._staged()
        for folder in staged.values():
            folder.conversation_ids = [
                cid for cid in folder.conversation_ids if cid != conversation_id
            ]
        self._commit(staged)

    # ── Private helpers ──────────────────────────────────────────────

    def _require(self, folder_id: str) -> Folder:
        folder = self._folders.get(folder_id)
        if folder is None:
            raise NotFoundError("folder", folder_id)
        return folder

    def _staged(self) -> dict[str, Folder]:
        return {fid: f.model_copy(deep=True) for fid, f in self._folders.items()}

    def _commit(self, staged: dict[str, Folder]) -> None:
        payload = [f.model_dump(mode="json", by_alias=True) for f in staged.values()]
        write_record(self._store, FOLDERS_KEY, payload)
        self._folders = staged

    def _load(self) -> dict[str, Folder]:
        raw = read_record(self._store, FOLDERS_KEY, default=[])
        folders: dict[str, Folder] = {}
        for item in raw if isinstance(raw, list) else []:
            try:
                folder = Folder.model_validate(item)
            except ValidationError as e:
                logger.warning("Skipping malformed folder record: %s", e)
                continue
            folders[folder.id] = folder
        return folders


def _clean_name(name: str) -> str:
    clean = name.strip()
    if not clean:
        raise InvalidArgumentError("Folder name cannot be empty")
    return clean
