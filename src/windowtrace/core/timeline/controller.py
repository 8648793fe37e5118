"""
Timeline controller: cursor, navigation and auto-play over one trace.

The controller owns the snapshot sequence produced by the trace engine, a
cursor into it, and the playback state. Collaborators interact with it through
two narrow seams:

- **Producers** (input UIs) call :meth:`TimelineController.start` and
  :meth:`TimelineController.reset`.
- **Consumers** (renderers) read :meth:`TimelineController.view` and subscribe
  to "state changed" and "playback ended" notifications. Listeners receive an
  immutable :class:`TimelineView`, never the controller's internals.

State machine
-------------
``IDLE`` (no sequence) -> ``start`` -> ``READY`` (paused) -> ``play`` ->
``PLAYING``. ``pause``, manual stepping, ``seek``, ``start`` and ``reset`` all
leave ``PLAYING``; reaching the last snapshot during auto-play returns to
``READY`` and fires the playback-ended notification once.

Timers
------
Entering ``PLAYING`` arms exactly one repeating timer with a period of
``base_interval_ms / speed``. Every way out of ``PLAYING`` cancels it, and a
speed change while playing cancels and re-arms it at the new period. Each timer
is bound to a generation number; a tick from any generation other than the
current one does nothing.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from windowtrace.core.settings import get_logger, load_settings
from windowtrace.core.trace.engine import generate_trace
from windowtrace.core.trace.snapshot import Snapshot

from .scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = get_logger(__name__)


class TimelineState(str, Enum):
    """Coarse playback state exposed to collaborators."""

    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"


@dataclass(frozen=True, slots=True)
class TimelineView:
    """Read-only projection of the timeline handed to renderers and listeners.

    Attributes
    ----------
    snapshot : Snapshot
        The snapshot under the cursor, or ``Snapshot.empty()`` while idle.
    cursor : int | None
        Current index, ``None`` while idle.
    total : int
        Number of snapshots in the loaded trace.
    """

    snapshot: Snapshot
    cursor: int | None
    total: int
    state: TimelineState
    speed: float
    can_step_back: bool
    can_step_forward: bool
    is_at_end: bool

    @property
    def is_playing(self) -> bool:
        return self.state is TimelineState.PLAYING


Listener = Callable[[TimelineView], None]


class TimelineController:
    """
    Navigate a trace step by step or play it back on a timer.

    Parameters
    ----------
    scheduler : Scheduler | None
        Source of repeating timers. Defaults to :class:`AsyncioScheduler`,
        which requires ``play`` to be called with an event loop running.
    base_interval_ms : float | None
        Tick period at 1x speed. Defaults to ``settings.base_interval_ms``.
    speed : float | None
        Initial speed multiplier. Defaults to ``settings.default_speed``.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        *,
        base_interval_ms: float | None = None,
        speed: float | None = None,
    ) -> None:
        cfg = load_settings()
        self._scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._base_interval_ms = (
            base_interval_ms if base_interval_ms is not None else cfg.base_interval_ms
        )
        if not _is_positive_finite(self._base_interval_ms):
            raise ValueError("base_interval_ms must be a positive, finite number")

        initial_speed = speed if speed is not None else cfg.default_speed
        if not _is_positive_finite(initial_speed):
            raise ValueError("speed must be a positive, finite number")
        self._speed: float = float(initial_speed)

        self._sequence: tuple[Snapshot, ...] = ()
        self._cursor: int | None = None
        self._playing = False

        self._timer: TimerHandle | None = None
        self._generation = 0

        self._listeners: list[Listener] = []
        self._end_listeners: list[Listener] = []

    # ------------------------------ Queries ---------------------------------

    @property
    def sequence(self) -> tuple[Snapshot, ...]:
        return self._sequence

    @property
    def cursor(self) -> int | None:
        return self._cursor

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def base_interval_ms(self) -> float:
        return self._base_interval_ms

    @property
    def period_ms(self) -> float:
        """Current auto-play tick period."""
        return self._base_interval_ms / self._speed

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def state(self) -> TimelineState:
        if self._cursor is None:
            return TimelineState.IDLE
        return TimelineState.PLAYING if self._playing else TimelineState.READY

    @property
    def can_step_back(self) -> bool:
        return self._cursor is not None and self._cursor > 0

    @property
    def can_step_forward(self) -> bool:
        return self._cursor is not None and self._cursor < len(self._sequence) - 1

    @property
    def is_at_end(self) -> bool:
        return self._cursor is not None and self._cursor == len(self._sequence) - 1

    @property
    def current_snapshot(self) -> Snapshot:
        if self._cursor is None:
            return Snapshot.empty()
        return self._sequence[self._cursor]

    def view(self) -> TimelineView:
        """Return an immutable picture of the current timeline state."""
        return TimelineView(
            snapshot=self.current_snapshot,
            cursor=self._cursor,
            total=len(self._sequence),
            state=self.state,
            speed=self._speed,
            can_step_back=self.can_step_back,
            can_step_forward=self.can_step_forward,
            is_at_end=self.is_at_end,
        )

    # --------------------------- Subscriptions ------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a "state changed" listener; returns an unsubscribe callable."""
        return _register(self._listeners, listener)

    def on_playback_end(self, listener: Listener) -> Callable[[], None]:
        """Register a listener fired when auto-play runs off the end of the trace."""
        return _register(self._end_listeners, listener)

    # ----------------------------- Lifecycle --------------------------------

    def start(self, text: object) -> None:
        """Replace any loaded trace with a fresh one for ``text`` and park at step 0."""
        self._stop_timer()
        self._playing = False
        self._sequence = generate_trace(text)
        self._cursor = 0
        logger.debug("Timeline started with %d snapshots", len(self._sequence))
        self._notify()

    def reset(self) -> None:
        """Drop the loaded trace and return to ``IDLE``."""
        self._stop_timer()
        self._playing = False
        self._sequence = ()
        self._cursor = None
        logger.debug("Timeline reset")
        self._notify()

    # ----------------------------- Navigation -------------------------------

    def step_forward(self) -> bool:
        """Advance one snapshot. Pauses playback; returns ``False`` at the end."""
        paused = self._leave_playing()
        moved = self._advance()
        if moved or paused:
            self._notify()
        return moved

    def step_backward(self) -> bool:
        """Go back one snapshot. Pauses playback; returns ``False`` at the start."""
        paused = self._leave_playing()
        moved = self.can_step_back
        if moved:
            assert self._cursor is not None
            self._cursor -= 1
        if moved or paused:
            self._notify()
        return moved

    def seek(self, index: int) -> bool:
        """Jump to ``index``. Pauses playback; out-of-range indices are rejected."""
        if self._cursor is None or not 0 <= index < len(self._sequence):
            return False
        paused = self._leave_playing()
        if index != self._cursor or paused:
            self._cursor = index
            self._notify()
        return True

    # ------------------------------ Playback --------------------------------

    def play(self) -> bool:
        """Start auto-play. Returns ``False`` (and stays paused) when nothing is left to play."""
        if self._playing:
            return True
        if not self.can_step_forward:
            return False
        self._playing = True
        self._arm_timer()
        logger.debug("Playback started at %.1fx (period %.1f ms)", self._speed, self.period_ms)
        self._notify()
        return True

    def pause(self) -> None:
        if self._leave_playing():
            self._notify()

    def toggle_play_pause(self) -> bool:
        """Pause if playing, otherwise try to play. Returns the new playing flag."""
        if self._playing:
            self.pause()
        else:
            self.play()
        return self._playing

    def set_speed(self, multiplier: float) -> bool:
        """Change the speed multiplier; an active timer is re-armed at the new period."""
        if not _is_positive_finite(multiplier):
            logger.warning("Rejected playback speed %r", multiplier)
            return False
        self._speed = float(multiplier)
        if self._playing:
            self._arm_timer()
        logger.debug("Playback speed set to %.2fx", self._speed)
        self._notify()
        return True

    # ------------------------------ Internals -------------------------------

    def _advance(self) -> bool:
        if not self.can_step_forward:
            return False
        assert self._cursor is not None
        self._cursor += 1
        return True

    def _leave_playing(self) -> bool:
        """Cancel auto-play if active; return whether the state changed."""
        if not self._playing:
            return False
        self._stop_timer()
        self._playing = False
        return True

    def _arm_timer(self) -> None:
        self._stop_timer()
        self._generation += 1
        generation = self._generation
        self._timer = self._scheduler.call_every(self.period_ms, lambda: self._on_tick(generation))

    def _stop_timer(self) -> None:
        # Bumping the generation also disarms any tick already queued by the loop.
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or not self._playing:
            return
        self._advance()
        if self.is_at_end:
            self._stop_timer()
            self._playing = False
            logger.debug("Playback reached the end of the trace")
            self._notify()
            view = self.view()
            for listener in list(self._end_listeners):
                listener(view)
            return
        self._notify()

    def _notify(self) -> None:
        view = self.view()
        for listener in list(self._listeners):
            listener(view)


def _is_positive_finite(value: float) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and (
        math.isfinite(value) and value > 0
    )


def _register(bucket: list[Listener], listener: Listener) -> Callable[[], None]:
    bucket.append(listener)

    def unsubscribe() -> None:
        if listener in bucket:
            bucket.remove(listener)

    return unsubscribe


__all__ = ["Listener", "TimelineController", "TimelineState", "TimelineView"]
