"""Default search engine: filtered substring search over messages."""

import logging

from ..config import MIN_QUERY_LENGTH, NO_FOLDER
from ..conversations import Conversation, ConversationRepository, Message
from ..errors import InvalidArgumentError, NotFoundError
from ..folders import FolderRegistry
from .base import SearchEngine
from .matching import MatchPredicate, SubstringMatcher, highlight
from .models import SearchFilters, SearchResult

logger = logging.getLogger(__name__)


class DefaultSearchEngine(SearchEngine):
    """Read-only query layer over the repository and folder registry.

    Hidden design decisions:
    - Filters are exact-match predicates; unknown values match nothing
    - Matching is delegated to a MatchPredicate
    - Ordering is newest message first, ties by conversation then message id
    """

    def __init__(
        self,
        repository: ConversationRepository,
        folders: FolderRegistry,
        matcher: MatchPredicate | None = None,
        min_query_length: int = MIN_QUERY_LENGTH
    ):
        """Initialize the search engine.

        Args:
            repository: Source of conversations and messages
            folders: Registry used by the folder filter
            matcher: Match predicate (default: case-insensitive substring)
            min_query_length: Shortest trimmed query that is executed
        """
        self._repository = repository
        self._folders = folders
        self._matcher = matcher or SubstringMatcher()
        self._min_query_length = min_query_length

    def search(self, filters: SearchFilters) -> list[SearchResult]:
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise InvalidArgumentError("date_from must not be after date_to")

        query = filters.query.strip()
        if len(query) < self._min_query_length:
            return []

        results = []
        for conversation in self._candidate_conversations(filters):
            for message in conversation.messages:
                if not self._message_passes(message, filters):
                    continue
                spans = self._matcher.find_spans(message.content, query)
                if spans:
                    results.append(self._build_result(conversation, message, spans))

        results.sort(key=lambda r: (r.conversation_id, r.message_id))
        results.sort(key=lambda r: r.timestamp, reverse=True)
        return results

    def _candidate_conversations(self, filters: SearchFilters) -> list[Conversation]:
        conversations = self._repository.list_conversations()

        if filters.system_type is not None:
            conversations = [c for c in conversations if c.system_type == filters.system_type]

        if filters.starred:
            conversations = [c for c in conversations if c.starred]

        if filters.folder_id is not None:
            allowed = self._folder_members(filters.folder_id)
            conversations = [c for c in conversations if c.id in allowed]

        return conversations

    def _folder_members(self, folder_id: str) -> set[str]:
        if folder_id == NO_FOLDER:
            return self._repository.ids() - self._folders.filed_ids()
        try:
            return set(self._folders.get_folder(folder_id).conversation_ids)
        except NotFoundError:
            logger.debug("Search filter names unknown folder %s", folder_id)
            return set()

    @staticmethod
    def _message_passes(message: Message, filters: SearchFilters) -> bool:
        if filters.message_type and filters.message_type != "all":
            if message.role != filters.message_type:
                return False
        if filters.date_from and message.timestamp < filters.date_from:
            return False
        if filters.date_to and message.timestamp > filters.date_to:
            return False
        return True

    @staticmethod
    def _build_result(
        conversation: Conversation,
        message: Message,
        spans: list[tuple[int, int]]
    ) -> SearchResult:
        return SearchResult(
            conversation_id=conversation.id,
            conversation_title=conversation.title,
            message_id=message.id,
            message_role=message.role.value,
            message_content=message.content,
            system_type=conversation.system_type,
            timestamp=message.timestamp,
            highlighted_content=highlight(message.content, spans),
            match_spans=spans,
        )
