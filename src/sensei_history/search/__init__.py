"""Conversation search module for sensei_history."""

from .base import SearchEngine
from .engine import DefaultSearchEngine
from .factory import create_search_engine
from .matching import (
    MatchPredicate,
    SubstringMatcher,
    clamp_highlighted,
    highlight,
    strip_highlights,
)
from .models import SearchFilters, SearchResult
from .session import SearchSession

__all__ = [
    "DefaultSearchEngine",
    "MatchPredicate",
    "SearchEngine",
    "SearchFilters",
    "SearchResult",
    "SearchSession",
    "SubstringMatcher",
    "clamp_highlighted",
    "create_search_engine",
    "highlight",
    "strip_highlights",
]
