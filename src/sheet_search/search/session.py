"""Observable search session.

Bridges an interactive front end and the engine: ``perform_search`` is
debounced, the query yields to the event loop once before running, and
listeners are told whenever ``results`` or ``is_searching`` change.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from sheet_search.search.engine import ALL_SHEETS, SearchEngine, SearchResult
from sheet_search.search.scheduler import Debouncer
from sheet_search.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchState:
    """Snapshot emitted to listeners."""

    results: list[SearchResult] = field(default_factory=list)
    is_searching: bool = False
    query: str = ""
    sheet_filter: str = ALL_SHEETS


Listener = Callable[[SearchState], None]


class SearchSession:
    """Debounced, observable search over a :class:`SearchEngine`."""

    def __init__(
        self,
        engine: SearchEngine,
        *,
        debounce_seconds: float | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            engine: Engine to run queries on.
            debounce_seconds: Quiet period before a query runs. Defaults
                to the engine settings' ``debounce_ms``.
        """
        self.engine = engine
        if debounce_seconds is None:
            debounce_seconds = engine.settings.debounce_ms / 1000.0
        self._debouncer = Debouncer(debounce_seconds)
        self._state = SearchState()
        self._listeners: list[Listener] = []
        self._task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def results(self) -> list[SearchResult]:
        return self._state.results

    @property
    def is_searching(self) -> bool:
        return self._state.is_searching

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def perform_search(self, query: str, sheet_filter: str = ALL_SHEETS) -> None:
        """Schedule a search; only the last call within the quiet period runs.

        Must be called from a running event loop. A blank query cancels any
        pending search and clears the results immediately.
        """
        self._generation += 1
        if not query.strip():
            self._debouncer.cancel()
            self._set_state(SearchState(sheet_filter=sheet_filter))
            return

        generation = self._generation
        self._debouncer.schedule(lambda: self._start(query, sheet_filter, generation))

    def clear_results(self) -> None:
        """Discard the current result set."""
        self._set_state(
            SearchState(
                is_searching=self._state.is_searching,
                query=self._state.query,
                sheet_filter=self._state.sheet_filter,
            )
        )

    def cancel(self) -> None:
        """Cancel a pending (not yet started) search."""
        self._debouncer.cancel()

    async def wait_idle(self, poll_interval: float = 0.01) -> None:
        """Wait until no search is pending or running."""
        while True:
            if self._task is not None and not self._task.done():
                await self._task
            elif self._debouncer.pending:
                await asyncio.sleep(poll_interval)
            else:
                return

    def _start(self, query: str, sheet_filter: str, generation: int) -> None:
        self._task = asyncio.get_running_loop().create_task(
            self._run(query, sheet_filter, generation)
        )

    async def _run(self, query: str, sheet_filter: str, generation: int) -> None:
        self._set_state(
            SearchState(
                results=self._state.results,
                is_searching=True,
                query=query,
                sheet_filter=sheet_filter,
            )
        )
        # Let pending input handlers run before the lookup
        await asyncio.sleep(0)

        response = self.engine.search(query, sheet_filter)

        if generation != self._generation:
            logger.debug("Dropping results for superseded query %r", query)
            return
        self._set_state(
            SearchState(
                results=response.results,
                is_searching=False,
                query=query,
                sheet_filter=sheet_filter,
            )
        )

    def _set_state(self, state: SearchState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
