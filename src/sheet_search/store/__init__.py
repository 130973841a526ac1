"""Application state and its persistence."""

from sheet_search.store.duckdb_store import DuckDBStateStore
from sheet_search.store.state import (
    AppState,
    SavedSearch,
    SearchHistoryEntry,
    Workspace,
)

__all__ = [
    "AppState",
    "DuckDBStateStore",
    "SavedSearch",
    "SearchHistoryEntry",
    "Workspace",
]
