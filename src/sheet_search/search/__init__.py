"""Search core for sheet-search.

Rows of every loaded sheet are flattened into searchable records, indexed
for fuzzy matching, queried with filtering and truncation, grouped by
spreadsheet and annotated for highlighting.
"""

from sheet_search.search.engine import (
    ALL_SHEETS,
    SearchEngine,
    SearchResponse,
    SearchResult,
    execute_query,
)
from sheet_search.search.grouping import ResultGroup, group_results
from sheet_search.search.highlight import (
    Span,
    SpanKind,
    annotate,
    field_matches,
    matching_fields,
)
from sheet_search.search.index import FuzzyIndex, IndexHit, IndexOptions
from sheet_search.search.records import (
    FlattenOptions,
    SearchableRecord,
    flatten_sheet,
    flatten_sheets,
)
from sheet_search.search.scheduler import Debouncer
from sheet_search.search.session import SearchSession, SearchState

__all__ = [
    # Records
    "FlattenOptions",
    "SearchableRecord",
    "flatten_sheet",
    "flatten_sheets",
    # Index
    "FuzzyIndex",
    "IndexHit",
    "IndexOptions",
    # Engine
    "ALL_SHEETS",
    "SearchEngine",
    "SearchResponse",
    "SearchResult",
    "execute_query",
    # Grouping
    "ResultGroup",
    "group_results",
    # Highlighting
    "Span",
    "SpanKind",
    "annotate",
    "field_matches",
    "matching_fields",
    # Scheduling
    "Debouncer",
    "SearchSession",
    "SearchState",
]
