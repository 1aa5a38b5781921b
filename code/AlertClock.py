from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class AlertScheduler(Protocol):
    """Clock plus one-shot delayed callbacks. All callbacks run on the caller's thread."""

    def now(self) -> datetime: ...

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_s), callback)


@dataclass(order=True)
class _SimTimer:
    due: datetime
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class SimulatedClock:
    """
    Manually advanced clock. advance() fires due timers in due order,
    moving now() to each timer's due time before calling it.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 5, 17, 12, 0, tzinfo=timezone.utc)
        self._timers: List[_SimTimer] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _SimTimer:
        t = _SimTimer(due=self._now + timedelta(seconds=max(0.0, delay_s)),
                      seq=next(self._seq),
                      callback=callback)
        heapq.heappush(self._timers, t)
        return t

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """Returns the number of callbacks fired."""
        target = self._now + timedelta(seconds=seconds)
        fired = 0
        while self._timers and self._timers[0].due <= target:
            t = heapq.heappop(self._timers)
            if t.cancelled:
                continue
            self._now = t.due
            t.callback()
            fired += 1
        self._now = target
        return fired
