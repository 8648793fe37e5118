"""
Repeating-timer schedulers used by the timeline controller for auto-play.

The controller never talks to a concrete timer API. It asks a
:class:`Scheduler` for a repeating callback and keeps the returned
:class:`TimerHandle` so it can cancel it. Two implementations are provided:

- :class:`AsyncioScheduler`: real time, on the running asyncio event loop. All
  callbacks run on the loop's thread, so the controller is only ever touched by
  one logical actor.
- :class:`VirtualScheduler`: a simulated clock advanced explicitly with
  :meth:`VirtualScheduler.advance`. Tests use it to play a trace
  deterministically; the CLI can use it to replay instantly.

Periods are expressed in milliseconds.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol

Callback = Callable[[], None]


class TimerHandle(Protocol):
    """Handle for one repeating timer."""

    def cancel(self) -> None:
        """Stop the timer. Cancelling twice is harmless."""


class Scheduler(Protocol):
    """Factory for repeating timers."""

    def call_every(self, period_ms: float, callback: Callback) -> TimerHandle:
        """Invoke ``callback`` every ``period_ms`` until the handle is cancelled."""


# --------------------------------------------------------------------------- #
# asyncio
# --------------------------------------------------------------------------- #


class _AsyncioTimer:
    """Fixed-rate repeating timer built on ``loop.call_at``."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop, period_ms: float, callback: Callback
    ) -> None:
        self._loop = loop
        self._period = period_ms / 1000.0
        self._callback = callback
        self._cancelled = False
        self._deadline = loop.time() + self._period
        self._handle: asyncio.TimerHandle = loop.call_at(self._deadline, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Arm the next tick first so a callback that cancels us also cancels it.
        self._deadline += self._period
        self._handle = self._loop.call_at(self._deadline, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioScheduler:
    """Schedule repeating callbacks on an asyncio event loop.

    When no loop is given, the running loop is looked up on each
    :meth:`call_every`, which therefore must be called from inside a coroutine
    or a loop callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(self, period_ms: float, callback: Callback) -> TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return _AsyncioTimer(loop, period_ms, callback)


# --------------------------------------------------------------------------- #
# Simulated clock
# --------------------------------------------------------------------------- #


class _VirtualTimer:
    __slots__ = ("origin", "period", "callback", "fired", "cancelled")

    def __init__(self, origin: float, period: float, callback: Callback) -> None:
        self.origin = origin
        self.period = period
        self.callback = callback
        self.fired = 0
        self.cancelled = False

    @property
    def next_due(self) -> float:
        # Multiplying instead of accumulating keeps deadlines free of float drift.
        return self.origin + (self.fired + 1) * self.period

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Deterministic scheduler driven by a simulated millisecond clock.

    Nothing fires until :meth:`advance` is called. Timers due within the
    advanced span fire in deadline order (creation order breaks ties), and
    timers created by a callback are honoured within the same span.
    """

    def __init__(self) -> None:
        self._now: float = 0.0
        self._timers: list[_VirtualTimer] = []

    @property
    def now_ms(self) -> float:
        """Current simulated time in milliseconds."""
        return self._now

    @property
    def active_timers(self) -> int:
        """Number of timers that have not been cancelled."""
        return sum(1 for t in self._timers if not t.cancelled)

    def call_every(self, period_ms: float, callback: Callback) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        timer = _VirtualTimer(self._now, period_ms, callback)
        self._timers.append(timer)
        return timer

    def advance(self, ms: float) -> int:
        """Move the clock forward by ``ms`` and fire every due tick.

        Returns
        -------
        int
            Number of callbacks invoked.
        """
        if ms < 0:
            raise ValueError("cannot move the clock backwards")
        target = self._now + ms
        fired = 0
        while True:
            self._timers = [t for t in self._timers if not t.cancelled]
            due = [t for t in self._timers if t.next_due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_due)
            self._now = timer.next_due
            timer.fired += 1
            fired += 1
            timer.callback()
        self._now = target
        return fired


__all__ = ["AsyncioScheduler", "Scheduler", "TimerHandle", "VirtualScheduler"]
