"""Query execution.

The engine owns the fuzzy index derived from an :class:`AppState`. The
index is rebuilt from scratch when the sheet collection or an indexing
setting changes and swapped in as a whole, so a query never sees a
partially built index.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

from sheet_search.config.schema import SearchSettings
from sheet_search.search.index import FuzzyIndex, IndexHit
from sheet_search.sheets.models import SheetSource
from sheet_search.store.state import AppState
from sheet_search.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

ALL_SHEETS = "all"


@dataclass
class SearchResult:
    """A scored row returned by a query."""

    id: str
    spreadsheet_id: str
    spreadsheet_name: str
    spreadsheet_source: SheetSource
    row_index: int
    data: dict[str, Any]
    tags: list[str]
    metadata: dict[str, Any]
    score: float  # 0-1, 1 = perfect match

    @classmethod
    def from_hit(cls, hit: IndexHit) -> "SearchResult":
        record = hit.record
        return cls(
            id=record.id,
            spreadsheet_id=record.spreadsheet_id,
            spreadsheet_name=record.spreadsheet_name,
            spreadsheet_source=record.spreadsheet_source,
            row_index=record.row_index,
            data=dict(record.data),
            tags=list(record.tags),
            metadata=dict(record.metadata),
            score=1.0 - hit.distance,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "spreadsheet_id": self.spreadsheet_id,
            "spreadsheet_name": self.spreadsheet_name,
            "spreadsheet_source": self.spreadsheet_source.value,
            "row_index": self.row_index,
            "data": self.data,
            "tags": self.tags,
            "metadata": self.metadata,
            "score": round(self.score, 4),
        }


@dataclass
class SearchResponse:
    """Response from a search operation."""

    query: str
    sheet_filter: str
    results: list[SearchResult]
    total_records: int
    search_time_ms: float


def execute_query(
    index: FuzzyIndex,
    query: str,
    sheet_filter: str = ALL_SHEETS,
    max_results: int = 1000,
) -> list[SearchResult]:
    """Run a query against an index.

    The sheet filter is applied after ranking so the retained hits keep
    their relative order, then the list is truncated to ``max_results``.

    Args:
        index: Index to query.
        query: Query text. Blank queries return no results.
        sheet_filter: ``"all"`` or a spreadsheet id.
        max_results: Maximum number of results.

    Returns:
        Results ordered by descending score.
    """
    if not query.strip():
        return []

    hits = index.search(query)
    if sheet_filter != ALL_SHEETS:
        hits = [h for h in hits if h.record.spreadsheet_id == sheet_filter]

    return [SearchResult.from_hit(h) for h in hits[: max(max_results, 0)]]


class SearchEngine:
    """Query executor bound to an application state.

    ``settings`` overrides the state's search settings for this engine
    only, e.g. a one-off threshold from the command line.
    """

    def __init__(self, state: AppState, settings: SearchSettings | None = None) -> None:
        self.state = state
        self._settings = settings
        self._index: FuzzyIndex | None = None
        self._index_key: tuple[Any, ...] | None = None

    @property
    def settings(self) -> SearchSettings:
        return self._settings if self._settings is not None else self.state.settings

    def _current_key(self) -> tuple[Any, ...]:
        return (self.state.revision, *self.settings.index_key())

    @property
    def index(self) -> FuzzyIndex:
        """The index for the current sheets and settings, rebuilt if stale.

        Raises:
            IndexBuildError: If the index cannot be built.
        """
        key = self._current_key()
        if self._index is None or key != self._index_key:
            index = FuzzyIndex.build(self.state.sheets, self.settings)
            self._index, self._index_key = index, key
        return self._index

    def invalidate(self) -> None:
        """Drop the current index; the next query rebuilds it."""
        self._index = None
        self._index_key = None

    def search(
        self,
        query: str,
        sheet_filter: str = ALL_SHEETS,
        max_results: int | None = None,
        *,
        record_history: bool = True,
    ) -> SearchResponse:
        """Search all loaded sheets.

        Failures inside the index are logged and reported as an empty
        result set. Every non-blank query is recorded in the history,
        including ones with no results.

        Args:
            query: Query text.
            sheet_filter: ``"all"`` or a spreadsheet id.
            max_results: Override for the configured maximum.
            record_history: Whether to append a history entry.

        Returns:
            SearchResponse with ranked results.
        """
        start_time = time.perf_counter()

        if not query.strip():
            return SearchResponse(query, sheet_filter, [], 0, 0.0)

        limit = max_results if max_results is not None else self.settings.max_results
        total_records = 0
        try:
            index = self.index
            total_records = len(index)
            results = execute_query(index, query, sheet_filter, limit)
        except Exception:
            log_with_context(
                logger,
                logging.ERROR,
                "Search failed",
                exc_info=True,
                query=query,
                sheet_filter=sheet_filter,
            )
            results = []

        if record_history:
            self.state.record_search(query, len(results))

        search_time = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            logging.DEBUG,
            "Search completed",
            query=query,
            result_count=len(results),
            search_time_ms=round(search_time, 2),
        )

        return SearchResponse(
            query=query,
            sheet_filter=sheet_filter,
            results=results,
            total_records=total_records,
            search_time_ms=search_time,
        )
