from ..conversations import ConversationRepository
from ..folders import FolderRegistry
from .base import SearchEngine
from .engine import DefaultSearchEngine
from .matching import MatchPredicate


def create_search_engine(
    repository: ConversationRepository,
    folders: FolderRegistry,
    matcher: MatchPredicate | None = None,
    **config
) -> SearchEngine:
    """Create a search engine instance.

    Args:
        repository: Conversation repository to search
        folders: Folder registry used by the folder filter
        matcher: Optional match predicate (default: substring)
        **config: Additional configuration
            - min_query_length: int (default: 2)

    Returns:
        Initialized search engine instance
    """
    kwargs = {}
    if "min_query_length" in config:
        kwargs["min_query_length"] = config["min_query_length"]
    return DefaultSearchEngine(repository, folders, matcher=matcher, **kwargs)
