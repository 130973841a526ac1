"""Cancelable debounce timer on the asyncio event loop."""

import asyncio
from collections.abc import Callable
from typing import Any


class Debouncer:
    """Run only the last of a burst of scheduled calls.

    Each :meth:`schedule` cancels the pending call, if any, before
    arming a new timer.
    """

    def __init__(
        self,
        delay: float = 0.3,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the debouncer.

        Args:
            delay: Default quiet period in seconds.
            loop: Event loop to use. Defaults to the running loop.
        """
        self.delay = delay
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled and has not fired yet."""
        return self._handle is not None

    def schedule(
        self,
        fn: Callable[[], Any],
        delay: float | None = None,
    ) -> asyncio.TimerHandle:
        """Schedule ``fn`` after the quiet period, superseding any pending call."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        wait = self.delay if delay is None else delay
        handle = loop.call_later(wait, self._fire, fn)
        self._handle = handle
        return handle

    def cancel(self) -> bool:
        """Cancel the pending call. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self, fn: Callable[[], Any]) -> None:
        self._handle = None
        fn()
