import heapq

import pytest


class _Handle:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Virtual-time scheduler: callbacks only fire inside advance()."""

    def __init__(self):
        self.now = 0.0
        self._queue: list = []
        self._seq = 0

    def time(self) -> float:
        return self.now

    def call_later(self, delay, callback):
        self._seq += 1
        handle = _Handle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.due, self._seq, handle))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = due
            handle.callback()
        self.now = target

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)


@pytest.fixture
def scheduler():
    return FakeScheduler()
