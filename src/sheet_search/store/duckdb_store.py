"""DuckDB-backed persistence for application state."""

import json
from pathlib import Path
from typing import Any

import duckdb

from sheet_search.config.schema import SearchSettings
from sheet_search.exceptions import StorageConnectionError, StorageError
from sheet_search.sheets.models import Sheet
from sheet_search.store.schema import ALL_TABLES, STATE_TABLES
from sheet_search.store.state import (
    AppState,
    SavedSearch,
    SearchHistoryEntry,
    Workspace,
)
from sheet_search.utils.logging import get_logger

logger = get_logger(__name__)

_SEARCH_SETTINGS_KEY = "search"


class DuckDBStateStore:
    """Persist sheets, history, saved searches, workspaces and settings.

    Attributes:
        db_path: Path to the database file, or None for in-memory.
    """

    def __init__(self, db_path: Path | str | None = None) -> None:
        """Open (and create if needed) the state database.

        Args:
            db_path: Path to the database file. If None, uses in-memory database.

        Raises:
            StorageConnectionError: If the database cannot be opened.
        """
        self.db_path = Path(db_path) if db_path else None
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._init_db()

    def _init_db(self) -> None:
        try:
            if self.db_path:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = duckdb.connect(str(self.db_path))
            else:
                self._conn = duckdb.connect(":memory:")
            for table_sql in ALL_TABLES:
                self._conn.execute(table_sql)
        except duckdb.Error as e:
            raise StorageConnectionError(
                f"Failed to open state database {self.db_path or ':memory:'}: {e}"
            ) from e

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise StorageConnectionError("State database is closed")
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "DuckDBStateStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load_state(self, default_settings: SearchSettings | None = None) -> AppState:
        """Read the full application state.

        Args:
            default_settings: Settings to use when none were saved.

        Returns:
            AppState populated from the database.
        """
        conn = self._get_connection()
        try:
            sheets = [
                Sheet.from_dict(json.loads(row[0]))
                for row in conn.execute(
                    "SELECT payload FROM sheets ORDER BY sort_order"
                ).fetchall()
            ]
            history = [
                SearchHistoryEntry(
                    id=row[0], query=row[1], timestamp=row[2], results_count=row[3]
                )
                for row in conn.execute(
                    "SELECT id, query, timestamp_ms, results_count "
                    "FROM search_history ORDER BY sort_order"
                ).fetchall()
            ]
            saved = [
                SavedSearch(
                    id=row[0],
                    name=row[1],
                    query=row[2],
                    filters=json.loads(row[3]) if row[3] else {},
                    created_at=row[4],
                )
                for row in conn.execute(
                    "SELECT id, name, query, filters, created_at "
                    "FROM saved_searches ORDER BY sort_order"
                ).fetchall()
            ]
            workspaces = [
                Workspace(
                    id=row[0],
                    name=row[1],
                    urls=json.loads(row[2]),
                    created_at=row[3],
                    last_used=row[4],
                )
                for row in conn.execute(
                    "SELECT id, name, urls, created_at, last_used "
                    "FROM workspaces ORDER BY sort_order"
                ).fetchall()
            ]
            settings_row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", [_SEARCH_SETTINGS_KEY]
            ).fetchone()
            if settings_row:
                settings = SearchSettings.model_validate(json.loads(settings_row[0]))
            else:
                settings = default_settings or SearchSettings()
        except (duckdb.Error, ValueError, KeyError) as e:
            raise StorageError(f"Failed to load state: {e}") from e

        return AppState(
            sheets,
            settings,
            search_history=history,
            saved_searches=saved,
            workspaces=workspaces,
            settings_customized=settings_row is not None,
        )

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def save_state(self, state: AppState) -> None:
        """Replace the stored state with ``state`` in one transaction."""
        conn = self._get_connection()
        try:
            conn.begin()
            for table in STATE_TABLES:
                conn.execute(f"DELETE FROM {table}")

            for position, sheet in enumerate(state.sheets):
                conn.execute(
                    "INSERT INTO sheets (id, sort_order, name, source, row_count, payload) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        sheet.id,
                        position,
                        sheet.name,
                        sheet.source.value,
                        sheet.row_count,
                        json.dumps(sheet.to_dict(), default=str),
                    ],
                )

            for position, entry in enumerate(state.search_history):
                conn.execute(
                    "INSERT INTO search_history "
                    "(id, sort_order, query, timestamp_ms, results_count) "
                    "VALUES (?, ?, ?, ?, ?)",
                    [entry.id, position, entry.query, entry.timestamp, entry.results_count],
                )

            for position, saved in enumerate(state.saved_searches):
                conn.execute(
                    "INSERT INTO saved_searches "
                    "(id, sort_order, name, query, filters, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        saved.id,
                        position,
                        saved.name,
                        saved.query,
                        json.dumps(saved.filters, default=str),
                        saved.created_at,
                    ],
                )

            for position, workspace in enumerate(state.workspaces):
                conn.execute(
                    "INSERT INTO workspaces "
                    "(id, sort_order, name, urls, created_at, last_used) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        workspace.id,
                        position,
                        workspace.name,
                        json.dumps(workspace.urls),
                        workspace.created_at,
                        workspace.last_used,
                    ],
                )

            if state.settings_customized:
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?)",
                    [_SEARCH_SETTINGS_KEY, state.settings.model_dump_json()],
                )
            conn.commit()
        except duckdb.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to save state: {e}") from e

        logger.debug(
            "Saved state: %d sheets, %d history entries",
            len(state.sheets),
            len(state.search_history),
        )

    def stats(self) -> dict[str, int]:
        """Row counts per table."""
        conn = self._get_connection()
        counts: dict[str, int] = {}
        for table in STATE_TABLES:
            row = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
            counts[table] = row[0] if row else 0
        return counts
