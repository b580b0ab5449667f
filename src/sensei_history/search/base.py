from abc import ABC, abstractmethod

from .models import SearchFilters, SearchResult


class SearchEngine(ABC):
    """Abstract base class for conversation search.

    This module hides the design decision of how messages are matched,
    filtered and ranked.

    Hidden design decisions:
    - Candidate generation over conversations and messages
    - The match predicate (substring today)
    - Highlight rendering and result ordering
    """

    @abstractmethod
    def search(self, filters: SearchFilters) -> list[SearchResult]:
        """Execute a search.

        Args:
            filters: Query string and filter predicates

        Returns:
            Matching messages, most recent first

        Raises:
            InvalidArgumentError: If date_from is after date_to
        """
