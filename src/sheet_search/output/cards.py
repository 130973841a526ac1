"""Display model for search results.

Turns a search response into groups of result cards with annotated
spans, independent of how a formatter finally renders them.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sheet_search.search.engine import SearchResponse, SearchResult
from sheet_search.search.grouping import ResultGroup, group_results
from sheet_search.search.highlight import LINK_LABEL_MAX, Span, annotate, matching_fields
from sheet_search.sheets.models import Sheet

MAX_FOREGROUND_FIELDS = 4


def percentage_match(score: float) -> str:
    """Score as a whole percentage label, e.g. ``"87% match"``."""
    return f"{math.floor(score * 100 + 0.5)}% match"


def row_label(row_index: int) -> str:
    """1-based row label for a 0-based row index."""
    return f"Row {row_index + 1}"


def more_fields_label(hidden: int) -> str:
    return f"+{hidden} more matching field{'s' if hidden != 1 else ''}"


@dataclass
class FieldView:
    """A field name with its annotated value."""

    name: str
    spans: list[Span]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "spans": [s.to_dict() for s in self.spans]}


@dataclass
class ResultCard:
    """One result as shown to the user."""

    result: SearchResult
    fields: list[FieldView]
    hidden_fields: int
    row: list[FieldView]

    @property
    def subtitle(self) -> str:
        return f"{self.result.spreadsheet_source.label} • {row_label(self.result.row_index)}"

    @property
    def match_label(self) -> str:
        return percentage_match(self.result.score)

    @property
    def more_label(self) -> str | None:
        return more_fields_label(self.hidden_fields) if self.hidden_fields else None

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.result.to_dict(),
            "row_label": row_label(self.result.row_index),
            "match_label": self.match_label,
            "matching_fields": [f.to_dict() for f in self.fields],
            "hidden_matching_fields": self.hidden_fields,
        }


@dataclass
class GroupView:
    """A spreadsheet heading with its cards."""

    group: ResultGroup
    cards: list[ResultCard] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "spreadsheet_id": self.group.spreadsheet_id,
            "name": self.group.name,
            "source": self.group.source.label,
            "original_url": self.group.original_url,
            "match_label": self.group.match_label,
            "results": [c.to_dict() for c in self.cards],
        }


@dataclass
class SearchReport:
    """Everything a formatter needs to render one query."""

    query: str
    groups: list[GroupView]
    total_results: int
    total_records: int
    search_time_ms: float

    @property
    def summary(self) -> str:
        noun = "match" if self.total_results == 1 else "matches"
        return f'Showing {self.total_results} {noun} for "{self.query}"'

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "total_results": self.total_results,
            "total_records": self.total_records,
            "search_time_ms": round(self.search_time_ms, 2),
            "groups": [g.to_dict() for g in self.groups],
        }


def build_card(
    result: SearchResult,
    query: str,
    *,
    highlight: bool = True,
    max_fields: int = MAX_FOREGROUND_FIELDS,
    link_label_max: int = LINK_LABEL_MAX,
) -> ResultCard:
    """Annotate a result's matching fields and full row."""

    def view(name: str, value: Any) -> FieldView:
        return FieldView(
            name,
            annotate(value, query, highlight=highlight, link_label_max=link_label_max),
        )

    matching = matching_fields(result.data, query)
    return ResultCard(
        result=result,
        fields=[view(name, value) for name, value in matching[:max_fields]],
        hidden_fields=max(len(matching) - max_fields, 0),
        row=[view(name, value) for name, value in result.data.items()],
    )


def build_report(
    response: SearchResponse,
    sheets: Iterable[Sheet],
    *,
    highlight: bool = True,
    max_fields: int = MAX_FOREGROUND_FIELDS,
    link_label_max: int = LINK_LABEL_MAX,
) -> SearchReport:
    """Group a response by spreadsheet and build its cards."""
    groups = group_results(response.results, sheets)
    views = [
        GroupView(
            group,
            [
                build_card(
                    r,
                    response.query,
                    highlight=highlight,
                    max_fields=max_fields,
                    link_label_max=link_label_max,
                )
                for r in group.results
            ],
        )
        for group in groups.values()
    ]
    return SearchReport(
        query=response.query,
        groups=views,
        total_results=len(response.results),
        total_records=response.total_records,
        search_time_ms=response.search_time_ms,
    )
