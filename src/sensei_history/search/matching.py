"""Match predicate and highlight rendering.

The predicate decides which messages match a query and where; the
functions below turn those spans into highlighted text. Swapping the
predicate (tokenized, fuzzy) leaves filtering and ordering untouched.
"""

import html
import re
from abc import ABC, abstractmethod

from ..config import HIGHLIGHT_CLOSE, HIGHLIGHT_OPEN, SNIPPET_LENGTH

Span = tuple[int, int]

_ENTITY = re.compile(r"&(?:amp|lt|gt);")


class MatchPredicate(ABC):
    """Locates query matches inside message content."""

    @abstractmethod
    def find_spans(self, text: str, query: str) -> list[Span]:
        """
        Find every match of a query in a text.

        Args:
            text: Message content
            query: Trimmed query string

        Returns:
            Non-overlapping (start, end) offsets in ascending order;
            empty if the text does not match
        """

    def matches(self, text: str, query: str) -> bool:
        return bool(self.find_spans(text, query))


class SubstringMatcher(MatchPredicate):
    """Case-insensitive literal substring matching."""

    def find_spans(self, text: str, query: str) -> list[Span]:
        if not query:
            return []
        pattern = re.compile(re.escape(query), re.IGNORECASE)
        return [m.span() for m in pattern.finditer(text)]


def highlight(
    text: str,
    spans: list[Span],
    open_marker: str = HIGHLIGHT_OPEN,
    close_marker: str = HIGHLIGHT_CLOSE
) -> str:
    """Wrap each span of text in markers, keeping the original casing.

    The text itself is HTML-escaped, so marker strings that already occur
    in a message can never be mistaken for inserted markers.
    """
    parts = []
    cursor = 0
    for start, end in spans:
        parts.append(html.escape(text[cursor:start], quote=False))
        parts.append(open_marker)
        parts.append(html.escape(text[start:end], quote=False))
        parts.append(close_marker)
        cursor = end
    parts.append(html.escape(text[cursor:], quote=False))
    return "".join(parts)


def strip_highlights(
    highlighted: str,
    open_marker: str = HIGHLIGHT_OPEN,
    close_marker: str = HIGHLIGHT_CLOSE
) -> str:
    """Remove highlight markers and unescape, recovering the original content."""
    return html.unescape(highlighted.replace(open_marker, "").replace(close_marker, ""))


def clamp_highlighted(
    highlighted: str,
    limit: int = SNIPPET_LENGTH,
    open_marker: str = HIGHLIGHT_OPEN,
    close_marker: str = HIGHLIGHT_CLOSE,
    ellipsis: str = "..."
) -> str:
    """Shorten highlighted text to limit visible characters.

    Markers do not count towards the limit and are never split, and an
    escaped character counts as one. A match cut by the limit is closed
    before the ellipsis.
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")

    out = []
    visible = 0
    inside = False
    i = 0
    while i < len(highlighted):
        if highlighted.startswith(close_marker, i):
            out.append(close_marker)
            inside = False
            i += len(close_marker)
            continue
        if visible >= limit:
            if inside:
                out.append(close_marker)
            out.append(ellipsis)
            return "".join(out)
        if highlighted.startswith(open_marker, i):
            out.append(open_marker)
            inside = True
            i += len(open_marker)
            continue
        entity = _ENTITY.match(highlighted, i)
        token = entity.group() if entity else highlighted[i]
        out.append(token)
        visible += 1
        i += len(token)
    return "".join(out)
