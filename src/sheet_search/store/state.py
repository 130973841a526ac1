"""Application state.

The state object owns the sheet collection and everything persisted
alongside it. Search components receive it explicitly instead of
reaching for globals; every change to the sheet collection bumps
``revision`` so derived indexes know to rebuild.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sheet_search.config.schema import SearchSettings
from sheet_search.exceptions import RowOutOfRangeError, SheetNotFoundError
from sheet_search.sheets.models import Sheet, now_ms
from sheet_search.utils.hashing import generate_id


@dataclass
class SearchHistoryEntry:
    """One executed query."""

    id: str
    query: str
    timestamp: int  # epoch ms
    results_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "timestamp": self.timestamp,
            "results_count": self.results_count,
        }


@dataclass
class SavedSearch:
    """A named query with its filters."""

    id: str
    name: str
    query: str
    filters: dict[str, Any] = field(default_factory=dict)
    created_at: int = field(default_factory=now_ms)


@dataclass
class Workspace:
    """A named collection of source URLs for bulk reloading."""

    id: str
    name: str
    urls: list[str]
    created_at: int = field(default_factory=now_ms)
    last_used: int = field(default_factory=now_ms)


class AppState:
    """Sheets, search settings, history, saved searches and workspaces."""

    def __init__(
        self,
        sheets: Iterable[Sheet] | None = None,
        settings: SearchSettings | None = None,
        *,
        search_history: Iterable[SearchHistoryEntry] | None = None,
        saved_searches: Iterable[SavedSearch] | None = None,
        workspaces: Iterable[Workspace] | None = None,
        settings_customized: bool = False,
    ) -> None:
        self._sheets: list[Sheet] = list(sheets or [])
        self._settings = settings or SearchSettings()
        self.search_history: list[SearchHistoryEntry] = list(search_history or [])
        self.saved_searches: list[SavedSearch] = list(saved_searches or [])
        self.workspaces: list[Workspace] = list(workspaces or [])
        self.settings_customized = settings_customized
        self.revision = 0

    # -------------------------------------------------------------------------
    # Sheets
    # -------------------------------------------------------------------------

    @property
    def sheets(self) -> tuple[Sheet, ...]:
        return tuple(self._sheets)

    def get_sheet(self, sheet_id: str) -> Sheet | None:
        return next((s for s in self._sheets if s.id == sheet_id), None)

    def require_sheet(self, sheet_id: str) -> Sheet:
        """Look up a sheet, raising if it is not loaded.

        Raises:
            SheetNotFoundError: If no sheet has this id.
        """
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            raise SheetNotFoundError(f"No spreadsheet with id {sheet_id!r}")
        return sheet

    def add_sheet(self, sheet: Sheet) -> None:
        self._sheets.append(sheet)
        self._touch()

    def add_sheets(self, sheets: Iterable[Sheet]) -> int:
        """Append several sheets; returns how many were added."""
        added = list(sheets)
        if added:
            self._sheets.extend(added)
            self._touch()
        return len(added)

    def remove_sheet(self, sheet_id: str) -> bool:
        before = len(self._sheets)
        self._sheets = [s for s in self._sheets if s.id != sheet_id]
        removed = len(self._sheets) != before
        if removed:
            self._touch()
        return removed

    def update_sheet_tags(self, sheet_id: str, row_index: int, tags: list[str]) -> None:
        """Replace a row's tags. Duplicates are dropped, order is kept."""
        sheet = self._require_row(sheet_id, row_index)
        unique = list(dict.fromkeys(t.strip() for t in tags if t.strip()))
        if unique:
            sheet.tags[row_index] = unique
        else:
            sheet.tags.pop(row_index, None)
        sheet.last_modified = now_ms()
        self._touch()

    def update_sheet_metadata(
        self,
        sheet_id: str,
        row_index: int,
        metadata: dict[str, Any],
    ) -> None:
        """Replace a row's metadata mapping."""
        sheet = self._require_row(sheet_id, row_index)
        sheet.metadata.pop(str(row_index), None)
        sheet.metadata[row_index] = dict(metadata)
        sheet.last_modified = now_ms()
        self._touch()

    def _require_row(self, sheet_id: str, row_index: int) -> Sheet:
        sheet = self.require_sheet(sheet_id)
        if not 0 <= row_index < sheet.row_count:
            raise RowOutOfRangeError(
                f"Row {row_index} out of range for {sheet_id!r} "
                f"({sheet.row_count} rows)"
            )
        return sheet

    def _touch(self) -> None:
        self.revision += 1

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    def update_search_settings(self, **changes: Any) -> SearchSettings:
        """Apply a partial settings update.

        Raises:
            pydantic.ValidationError: If a value is out of range.
        """
        merged = {**self._settings.model_dump(), **changes}
        self._settings = SearchSettings.model_validate(merged)
        self.settings_customized = True
        self.search_history = self.search_history[: self._settings.history_limit]
        return self._settings

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def add_search_history(self, entry: SearchHistoryEntry) -> None:
        """Prepend an entry, dropping the oldest beyond the history limit."""
        limit = self._settings.history_limit
        self.search_history = [entry, *self.search_history[: limit - 1]]

    def record_search(self, query: str, results_count: int) -> SearchHistoryEntry:
        entry = SearchHistoryEntry(
            id=generate_id("search", query, len(self.search_history)),
            query=query,
            timestamp=now_ms(),
            results_count=results_count,
        )
        self.add_search_history(entry)
        return entry

    def clear_search_history(self) -> None:
        self.search_history = []

    # -------------------------------------------------------------------------
    # Saved searches
    # -------------------------------------------------------------------------

    def add_saved_search(
        self,
        name: str,
        query: str,
        filters: dict[str, Any] | None = None,
    ) -> SavedSearch:
        saved = SavedSearch(
            id=generate_id("saved", name, query),
            name=name,
            query=query,
            filters=dict(filters or {}),
        )
        self.saved_searches.append(saved)
        return saved

    def remove_saved_search(self, saved_id: str) -> bool:
        before = len(self.saved_searches)
        self.saved_searches = [s for s in self.saved_searches if s.id != saved_id]
        return len(self.saved_searches) != before

    # -------------------------------------------------------------------------
    # Workspaces
    # -------------------------------------------------------------------------

    def add_workspace(self, name: str, urls: list[str]) -> Workspace:
        workspace = Workspace(
            id=generate_id("workspace", name),
            name=name,
            urls=[u.strip() for u in urls if u.strip()],
        )
        self.workspaces.append(workspace)
        return workspace

    def load_workspace(self, workspace_id: str) -> list[str]:
        """Return a workspace's URLs and mark it used; [] if unknown."""
        for workspace in self.workspaces:
            if workspace.id == workspace_id:
                workspace.last_used = now_ms()
                return list(workspace.urls)
        return []

    def remove_workspace(self, workspace_id: str) -> bool:
        before = len(self.workspaces)
        self.workspaces = [w for w in self.workspaces if w.id != workspace_id]
        return len(self.workspaces) != before
