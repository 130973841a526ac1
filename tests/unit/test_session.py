"""Tests for the debouncer and the observable search session."""

import asyncio

import pytest

from sheet_search.config.schema import SearchSettings
from sheet_search.search.engine import SearchEngine
from sheet_search.search.scheduler import Debouncer
from sheet_search.search.session import SearchSession, SearchState
from sheet_search.store.state import AppState


class TestDebouncer:
    """Tests for Debouncer."""

    @pytest.mark.asyncio
    async def test_only_last_call_runs(self) -> None:
        """Test a burst of calls runs only the last one."""
        calls: list[int] = []
        debouncer = Debouncer(delay=0.02)

        for i in range(5):
            debouncer.schedule(lambda i=i: calls.append(i))
        await asyncio.sleep(0.06)

        assert calls == [4]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Test cancelling prevents the pending call."""
        calls: list[str] = []
        debouncer = Debouncer(delay=0.02)
        debouncer.schedule(lambda: calls.append("x"))

        assert debouncer.pending
        assert debouncer.cancel() is True
        await asyncio.sleep(0.04)

        assert calls == []
        assert debouncer.cancel() is False

    @pytest.mark.asyncio
    async def test_delay_override(self) -> None:
        """Test a per-call delay replaces the default."""
        calls: list[str] = []
        debouncer = Debouncer(delay=10.0)
        debouncer.schedule(lambda: calls.append("fast"), delay=0.0)
        await asyncio.sleep(0.01)

        assert calls == ["fast"]


class TestSearchSession:
    """Tests for SearchSession."""

    @pytest.mark.asyncio
    async def test_debounced_search(self, state: AppState) -> None:
        """Test rapid queries execute once, for the last text."""
        session = SearchSession(SearchEngine(state), debounce_seconds=0.02)

        for partial in ("a", "ad", "ado", "adob", "adobe"):
            session.perform_search(partial)
        await session.wait_idle()

        assert session.state.query == "adobe"
        assert session.results
        assert session.is_searching is False
        assert [e.query for e in state.search_history] == ["adobe"]

    @pytest.mark.asyncio
    async def test_listener_sees_searching_then_results(self, state: AppState) -> None:
        """Test listeners observe the searching flag before results."""
        session = SearchSession(SearchEngine(state), debounce_seconds=0.0)
        seen: list[SearchState] = []
        unsubscribe = session.subscribe(seen.append)

        session.perform_search("summit")
        await session.wait_idle()
        unsubscribe()
        session.clear_results()

        assert [s.is_searching for s in seen] == [True, False]
        assert seen[-1].results[0].data["Title"] == "Adobe Summit"
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_blank_query_clears(self, state: AppState) -> None:
        """Test a blank query cancels pending work and clears results."""
        session = SearchSession(SearchEngine(state), debounce_seconds=0.0)
        session.perform_search("summit")
        await session.wait_idle()
        assert session.results

        session.perform_search("adobe")
        session.perform_search("  ")
        await session.wait_idle()

        assert session.results == []
        assert [e.query for e in state.search_history] == ["summit"]

    @pytest.mark.asyncio
    async def test_clear_results(self, state: AppState) -> None:
        """Test clear_results discards the result set."""
        session = SearchSession(SearchEngine(state), debounce_seconds=0.0)
        session.perform_search("design", "catalog")
        await session.wait_idle()

        session.clear_results()

        assert session.results == []
        assert session.state.sheet_filter == "catalog"

    @pytest.mark.asyncio
    async def test_cancel_pending(self, state: AppState) -> None:
        """Test cancel drops a scheduled search."""
        session = SearchSession(SearchEngine(state), debounce_seconds=0.05)
        session.perform_search("adobe")
        session.cancel()
        await session.wait_idle()

        assert session.results == []
        assert state.search_history == []

    def test_default_delay_from_settings(self, state: AppState) -> None:
        """Test the quiet period defaults to the debounce setting."""
        state.update_search_settings(debounce_ms=120)
        session = SearchSession(SearchEngine(state))

        assert session._debouncer.delay == pytest.approx(0.12)

    def test_default_delay_from_engine_override(self, state: AppState) -> None:
        """Test an engine settings override supplies the quiet period."""
        session = SearchSession(SearchEngine(state, SearchSettings(debounce_ms=0)))

        assert session._debouncer.delay == 0.0
