from __future__ import annotations

import asyncio
from typing import Any, Callable


class Debouncer:
    """Delay a callback until calls stop arriving for ``delay`` seconds.

    Each :meth:`call` cancels the previously scheduled fire, so at most one
    fire is pending at any time and it carries the latest arguments. Must be
    called from inside a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        self._callback(*args)
