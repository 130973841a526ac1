"""Match highlighting for result fields.

A field's text is split into plain, highlighted and link spans. URLs are
cut out first, so query terms inside a URL are never highlighted and the
URL is emitted whole as a single link span. Highlighting is a plain
case-insensitive substring test per query term and is independent of the
fuzzy scorer.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sheet_search.search.records import stringify

URL_RE = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)

LINK_LABEL_MAX = 50


class SpanKind(str, Enum):
    """Rendering kind of a span."""

    TEXT = "text"
    HIGHLIGHT = "highlight"
    LINK = "link"


@dataclass(frozen=True)
class Span:
    """A piece of field text.

    For links ``text`` is the display label and ``href`` the full URL.
    """

    kind: SpanKind
    text: str
    href: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "text": self.text}
        if self.href is not None:
            data["href"] = self.href
        return data


def query_terms(query: str) -> list[str]:
    """Split a query on whitespace, dropping empty terms."""
    return query.split()


def link_label(url: str, max_length: int = LINK_LABEL_MAX) -> str:
    """Shorten long URLs for display with a trailing ellipsis."""
    if len(url) <= max_length:
        return url
    return f"{url[: max_length - 3]}..."


def annotate(
    field_text: Any,
    query: str,
    *,
    highlight: bool = True,
    link_label_max: int = LINK_LABEL_MAX,
) -> list[Span]:
    """Split a field into text, highlight and link spans.

    Args:
        field_text: Field value; non-strings are stringified.
        query: Original query text.
        highlight: Whether to mark query terms.
        link_label_max: Longest link label before truncation.

    Returns:
        Spans in text order. Empty text yields no spans.
    """
    text = stringify(field_text)
    terms = query_terms(query) if highlight else []

    spans: list[Span] = []
    position = 0
    for match in URL_RE.finditer(text):
        spans.extend(_highlight_segment(text[position : match.start()], terms))
        url = match.group(0)
        spans.append(Span(SpanKind.LINK, link_label(url, link_label_max), href=url))
        position = match.end()
    spans.extend(_highlight_segment(text[position:], terms))
    return spans


def _highlight_segment(segment: str, terms: list[str]) -> list[Span]:
    """Mark every case-insensitive occurrence of each term in a URL-free segment."""
    if not segment:
        return []

    intervals: list[tuple[int, int]] = []
    for term in terms:
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        intervals.extend((m.start(), m.end()) for m in pattern.finditer(segment))

    if not intervals:
        return [Span(SpanKind.TEXT, segment)]

    # Overlapping hits from different terms become one highlight
    intervals.sort()
    merged: list[list[int]] = []
    for start, end in intervals:
        if merged and start < merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    spans: list[Span] = []
    position = 0
    for start, end in merged:
        if start > position:
            spans.append(Span(SpanKind.TEXT, segment[position:start]))
        spans.append(Span(SpanKind.HIGHLIGHT, segment[start:end]))
        position = end
    if position < len(segment):
        spans.append(Span(SpanKind.TEXT, segment[position:]))
    return spans


def visible_text(spans: list[Span]) -> str:
    """Concatenate span texts as displayed."""
    return "".join(span.text for span in spans)


def field_matches(value: Any, query: str) -> bool:
    """Whether any query term occurs in the stringified value."""
    lowered = stringify(value).lower()
    return any(term.lower() in lowered for term in query_terms(query))


def matching_fields(data: Mapping[str, Any], query: str) -> list[tuple[str, Any]]:
    """Fields to foreground in a result card, in column order."""
    return [(key, value) for key, value in data.items() if field_matches(value, query)]
