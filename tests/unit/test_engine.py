"""Tests for query execution."""

import pytest

from sheet_search.config.schema import SearchSettings
from sheet_search.search.engine import ALL_SHEETS, SearchEngine, SearchResult, execute_query
from sheet_search.search.index import FuzzyIndex
from sheet_search.sheets.models import Sheet
from sheet_search.sheets.sample import create_sample_video_database
from sheet_search.store.state import AppState


class TestWorkedExamples:
    """The two-row Adobe Summit examples."""

    def test_exact_query(self, summit_sheet: Sheet) -> None:
        """Test 'adobe' finds only the Adobe Summit row."""
        engine = SearchEngine(AppState([summit_sheet]))
        results = engine.search("adobe").results

        assert len(results) == 1
        assert results[0].data["Title"] == "Adobe Summit"
        assert results[0].score == pytest.approx(1.0)

    def test_typo_query(self, summit_sheet: Sheet) -> None:
        """Test a typo still matches with a reduced score."""
        engine = SearchEngine(AppState([summit_sheet]))
        results = engine.search("adobee").results

        assert [r.data["Title"] for r in results] == ["Adobe Summit"]
        assert 0.0 < results[0].score < 1.0

    def test_typo_in_exact_mode(self, summit_sheet: Sheet) -> None:
        """Test threshold 0 returns nothing for the typo."""
        state = AppState([summit_sheet], SearchSettings(fuzzy_threshold=0.0))
        assert SearchEngine(state).search("adobee").results == []


class TestExecuteQuery:
    """Tests for filtering, truncation and scoring."""

    @pytest.fixture
    def index(self) -> FuzzyIndex:
        sample = create_sample_video_database()
        other = Sheet(
            id="other",
            name="Other",
            headers=["Title"],
            data=[["Adobe Express Training"], ["Photoshop Basics"], ["Adobe Fonts"]],
        )
        return FuzzyIndex.build([sample, other], SearchSettings())

    def test_scores_non_increasing(self, index: FuzzyIndex) -> None:
        """Test results come back best first."""
        for query in ("adobe", "photoshop tutorial", "creative cloud", "2024"):
            scores = [r.score for r in execute_query(index, query)]
            assert scores == sorted(scores, reverse=True)

    def test_filter_after_ranking(self, index: FuzzyIndex) -> None:
        """Test filtering keeps the unfiltered relative order."""
        unfiltered = execute_query(index, "adobe", ALL_SHEETS)
        filtered = execute_query(index, "adobe", "other")

        expected = [r.id for r in unfiltered if r.spreadsheet_id == "other"]
        assert [r.id for r in filtered] == expected
        assert filtered

    def test_filter_then_truncate(self, index: FuzzyIndex) -> None:
        """Test truncation applies to the filtered list."""
        unfiltered = execute_query(index, "adobe", ALL_SHEETS)
        expected = [r.id for r in unfiltered if r.spreadsheet_id == "other"][:1]

        assert [r.id for r in execute_query(index, "adobe", "other", 1)] == expected

    def test_max_results(self, index: FuzzyIndex) -> None:
        """Test results are truncated in rank order."""
        full = execute_query(index, "adobe")
        top = execute_query(index, "adobe", max_results=3)

        assert len(full) > 3
        assert [r.id for r in top] == [r.id for r in full[:3]]

    def test_unknown_sheet_filter(self, index: FuzzyIndex) -> None:
        """Test an unknown sheet id filters everything out."""
        assert execute_query(index, "adobe", "missing") == []

    def test_blank_query(self, index: FuzzyIndex) -> None:
        """Test blank queries are a no-op."""
        assert execute_query(index, "  ") == []

    def test_result_fields(self, index: FuzzyIndex) -> None:
        """Test results carry the row, tags and metadata."""
        result = execute_query(index, "disney")[0]

        assert isinstance(result, SearchResult)
        assert result.spreadsheet_id == "sample_video_db"
        assert result.row_index == 7
        assert result.tags == ["customer-story", "enterprise"]
        assert result.metadata["customer"] == "Disney"
        assert result.to_dict()["spreadsheet_source"] == "upload"


class TestSearchEngine:
    """Tests for SearchEngine."""

    def test_history_recorded(self, state: AppState) -> None:
        """Test every non-blank query is recorded, even without results."""
        engine = SearchEngine(state)
        engine.search("adobe")
        engine.search("zzzzzzzz")
        engine.search("   ")

        assert [e.query for e in state.search_history] == ["zzzzzzzz", "adobe"]
        assert state.search_history[0].results_count == 0
        assert state.search_history[1].results_count >= 1

    def test_history_optional(self, state: AppState) -> None:
        """Test history can be skipped."""
        SearchEngine(state).search("adobe", record_history=False)
        assert state.search_history == []

    def test_history_cap(self, state: AppState) -> None:
        """Test 60 queries leave the 50 most recent, newest first."""
        engine = SearchEngine(state)
        for i in range(60):
            engine.search(f"query {i}")

        assert len(state.search_history) == 50
        assert state.search_history[0].query == "query 59"
        assert state.search_history[-1].query == "query 10"

    def test_index_reused_until_change(self, state: AppState, summit_sheet: Sheet) -> None:
        """Test the index is rebuilt only after sheets or settings change."""
        engine = SearchEngine(state)
        first = engine.index
        assert engine.index is first

        state.update_sheet_tags(summit_sheet.id, 1, ["keynote"])
        second = engine.index
        assert second is not first
        assert engine.search("keynote").results[0].row_index == 1

        state.update_search_settings(search_in_tags=False)
        assert engine.index is not second
        assert engine.search("keynote", record_history=False).results == []

    def test_max_results_setting_does_not_rebuild(self, state: AppState) -> None:
        """Test non-index settings leave the index alone."""
        engine = SearchEngine(state)
        first = engine.index
        state.update_search_settings(max_results=1)

        assert engine.index is first
        assert len(engine.search("2024").results) == 1

    def test_settings_override(self, state: AppState) -> None:
        """Test an engine-level override leaves the state untouched."""
        strict = SearchEngine(state, SearchSettings(fuzzy_threshold=0.0))

        assert strict.search("adobee").results == []
        assert state.settings.fuzzy_threshold == 0.4

    def test_invalidate(self, state: AppState) -> None:
        """Test invalidate forces a rebuild."""
        engine = SearchEngine(state)
        first = engine.index
        engine.invalidate()
        assert engine.index is not first

    def test_failure_degrades_to_empty(
        self, state: AppState, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test index errors are logged and yield no results."""

        def explode(*args: object, **kwargs: object) -> FuzzyIndex:
            raise RuntimeError("boom")

        monkeypatch.setattr(FuzzyIndex, "build", explode)
        response = SearchEngine(state).search("adobe")

        assert response.results == []
        assert state.search_history[0].results_count == 0

    def test_response_metadata(self, state: AppState) -> None:
        """Test responses report the searched record count."""
        response = SearchEngine(state).search("design", "catalog")

        assert response.query == "design"
        assert response.sheet_filter == "catalog"
        assert response.total_records == 5
        assert response.search_time_ms >= 0
        assert {r.spreadsheet_id for r in response.results} == {"catalog"}
