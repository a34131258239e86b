"""
scheduler.py
- Purpose: Cancellable periodic callbacks for the progress tracker.
- Design: The tracker talks to a small Scheduler protocol so production code runs on the
  asyncio loop while tests drive a virtual clock. Callbacks must not block.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class AsyncioScheduler:
    """Scheduler bound to an asyncio event loop (the running one by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()

    def time(self) -> float:
        return self._loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback)


class PeriodicTicker:
    """
    Runs `callback` every `interval` seconds until stopped.

    The next tick is scheduled before the callback runs, so a callback that
    calls stop() or restart() on its own ticker leaves no stray handle behind.
    """

    def __init__(self, scheduler: Scheduler, interval: float, callback: Callable[[], None], *, name: str = "ticker"):
        self._scheduler = scheduler
        self._interval = interval
        self._callback = callback
        self._handle: Cancellable | None = None
        self._active = False
        self.name = name

    @property
    def running(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._schedule()

    def stop(self) -> None:
        self._active = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def restart(self) -> None:
        self.stop()
        self.start()

    def _schedule(self) -> None:
        self._handle = self._scheduler.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if not self._active:
            return
        self._schedule()
        self._callback()
