"""
Tests for the TimelineController.

Scope
-----
1.  **Navigation**: stepping, seeking, start and reset.
2.  **Auto-play**: tick cadence, speed changes, pause and end of playback,
    driven by the simulated clock so nothing sleeps.
3.  **Stale ticks**: callbacks from a cancelled timer never move the cursor.
4.  **Listeners**: one notification per state change, plus the end signal.
"""

from __future__ import annotations

import asyncio
import dataclasses
import math

import pytest

from windowtrace.core.timeline.controller import (
    TimelineController,
    TimelineState,
    TimelineView,
)
from windowtrace.core.timeline.scheduler import Callback, TimerHandle, VirtualScheduler
from windowtrace.core.trace.snapshot import Phase, Snapshot

BASE = 1000.0
AAB_TOTAL = 8


@pytest.fixture  # type: ignore[misc]
def clock() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture  # type: ignore[misc]
def timeline(clock: VirtualScheduler) -> TimelineController:
    return TimelineController(clock, base_interval_ms=BASE, speed=1.0)


class _QueueScheduler:
    """Records timer callbacks so a test can fire them by hand, stale or not."""

    class _Handle:
        def __init__(self) -> None:
            self.cancelled = False

        def cancel(self) -> None:
            self.cancelled = True

    def __init__(self) -> None:
        self.callbacks: list[Callback] = []

    def call_every(self, period_ms: float, callback: Callback) -> TimerHandle:
        self.callbacks.append(callback)
        return self._Handle()


# ------------------------------ Navigation ---------------------------------


def test_idle_controller(timeline: TimelineController) -> None:
    assert timeline.state is TimelineState.IDLE
    assert timeline.cursor is None
    assert timeline.current_snapshot == Snapshot.empty()
    assert not timeline.is_at_end
    assert not timeline.can_step_back
    assert not timeline.can_step_forward
    assert timeline.step_forward() is False
    assert timeline.step_backward() is False
    assert timeline.seek(0) is False
    assert timeline.play() is False
    assert timeline.view().total == 0


def test_start_parks_at_initialize(timeline: TimelineController) -> None:
    timeline.start("aab")
    assert timeline.state is TimelineState.READY
    assert timeline.cursor == 0
    assert len(timeline.sequence) == AAB_TOTAL
    assert timeline.current_snapshot.phase is Phase.INITIALIZE
    assert timeline.can_step_forward
    assert not timeline.can_step_back


def test_step_and_seek(timeline: TimelineController) -> None:
    timeline.start("aab")
    assert timeline.step_forward() is True
    assert timeline.cursor == 1
    assert timeline.step_backward() is True
    assert timeline.step_backward() is False
    assert timeline.cursor == 0

    assert timeline.seek(AAB_TOTAL - 1) is True
    assert timeline.is_at_end
    assert timeline.step_forward() is False
    assert timeline.seek(AAB_TOTAL) is False
    assert timeline.seek(-1) is False
    assert timeline.cursor == AAB_TOTAL - 1


def test_start_replaces_and_reset_clears(timeline: TimelineController) -> None:
    timeline.start("aab")
    timeline.seek(5)
    timeline.start("ab")
    assert timeline.cursor == 0
    assert timeline.current_snapshot.input_string == "ab"

    timeline.reset()
    assert timeline.state is TimelineState.IDLE
    assert timeline.sequence == ()
    assert timeline.current_snapshot == Snapshot.empty()


def test_start_coerces_input(timeline: TimelineController) -> None:
    timeline.start(None)
    assert timeline.view().total == 1
    assert timeline.current_snapshot.input_string == ""
    assert timeline.is_at_end
    assert timeline.play() is False


# ------------------------------- Auto-play ---------------------------------


def test_play_runs_to_end(timeline: TimelineController, clock: VirtualScheduler) -> None:
    ended: list[TimelineView] = []
    timeline.on_playback_end(ended.append)
    timeline.start("aab")

    assert timeline.play() is True
    assert timeline.state is TimelineState.PLAYING

    clock.advance((AAB_TOTAL - 1) * BASE)
    assert timeline.cursor == AAB_TOTAL - 1
    assert timeline.state is TimelineState.READY
    assert len(ended) == 1
    assert ended[0].is_at_end
    assert clock.active_timers == 0

    clock.advance(10 * BASE)
    assert len(ended) == 1


def test_tick_cadence(timeline: TimelineController, clock: VirtualScheduler) -> None:
    timeline.start("aab")
    timeline.play()
    clock.advance(BASE - 1)
    assert timeline.cursor == 0
    clock.advance(1)
    assert timeline.cursor == 1


def test_speed_change_rearms_timer(
    timeline: TimelineController, clock: VirtualScheduler
) -> None:
    timeline.start("aab")
    timeline.play()
    clock.advance(2.5 * BASE)
    assert timeline.cursor == 2

    assert timeline.set_speed(2) is True
    assert timeline.speed == 2.0
    assert timeline.period_ms == BASE / 2
    assert clock.active_timers == 1

    clock.advance(BASE)
    assert timeline.cursor == 4
    assert timeline.is_playing


def test_speed_change_while_paused(timeline: TimelineController, clock: VirtualScheduler) -> None:
    timeline.start("aab")
    assert timeline.set_speed(0.5) is True
    assert clock.active_timers == 0
    timeline.play()
    clock.advance(BASE)
    assert timeline.cursor == 0
    clock.advance(BASE)
    assert timeline.cursor == 1


@pytest.mark.parametrize("bad", [0, -1, math.nan, math.inf, True])
def test_invalid_speed_is_rejected(timeline: TimelineController, bad: float) -> None:
    assert timeline.set_speed(bad) is False
    assert timeline.speed == 1.0


def test_pause_stops_ticks(timeline: TimelineController, clock: VirtualScheduler) -> None:
    timeline.start("aab")
    timeline.play()
    clock.advance(BASE)
    timeline.pause()
    assert timeline.state is TimelineState.READY
    clock.advance(5 * BASE)
    assert timeline.cursor == 1
    assert clock.active_timers == 0


def test_manual_step_pauses_playback(
    timeline: TimelineController, clock: VirtualScheduler
) -> None:
    timeline.start("aab")
    timeline.play()
    assert timeline.step_forward() is True
    assert not timeline.is_playing
    clock.advance(5 * BASE)
    assert timeline.cursor == 1


def test_play_at_end_is_refused(timeline: TimelineController, clock: VirtualScheduler) -> None:
    timeline.start("aab")
    timeline.seek(AAB_TOTAL - 1)
    assert timeline.play() is False
    assert timeline.state is TimelineState.READY
    assert clock.active_timers == 0


def test_play_twice_keeps_one_timer(
    timeline: TimelineController, clock: VirtualScheduler
) -> None:
    timeline.start("aab")
    assert timeline.play() is True
    assert timeline.play() is True
    assert clock.active_timers == 1


def test_toggle_play_pause(timeline: TimelineController) -> None:
    timeline.start("aab")
    assert timeline.toggle_play_pause() is True
    assert timeline.toggle_play_pause() is False
    assert timeline.state is TimelineState.READY


def test_reset_and_restart_cancel_timer(
    timeline: TimelineController, clock: VirtualScheduler
) -> None:
    timeline.start("aab")
    timeline.play()
    timeline.reset()
    assert timeline.state is TimelineState.IDLE
    assert clock.active_timers == 0

    timeline.start("aab")
    timeline.play()
    timeline.start("ab")
    assert not timeline.is_playing
    assert timeline.cursor == 0
    assert clock.active_timers == 0


# ------------------------------ Stale ticks --------------------------------


def test_tick_after_pause_is_ignored() -> None:
    queue = _QueueScheduler()
    timeline = TimelineController(queue, base_interval_ms=BASE, speed=1.0)
    timeline.start("aab")
    timeline.play()
    timeline.pause()

    queue.callbacks[0]()
    assert timeline.cursor == 0


def test_tick_from_replaced_timer_is_ignored() -> None:
    queue = _QueueScheduler()
    timeline = TimelineController(queue, base_interval_ms=BASE, speed=1.0)
    timeline.start("aab")
    timeline.play()
    timeline.set_speed(2)
    assert len(queue.callbacks) == 2

    queue.callbacks[0]()
    assert timeline.cursor == 0
    queue.callbacks[1]()
    assert timeline.cursor == 1


# ------------------------------- Listeners ---------------------------------


def test_listeners_receive_views(timeline: TimelineController) -> None:
    views: list[TimelineView] = []
    unsubscribe = timeline.subscribe(views.append)
    timeline.start("aab")
    timeline.step_forward()
    timeline.step_backward()
    timeline.step_backward()
    assert [v.cursor for v in views] == [0, 1, 0]

    with pytest.raises(dataclasses.FrozenInstanceError):
        views[0].cursor = 5  # type: ignore[misc]

    unsubscribe()
    unsubscribe()
    timeline.step_forward()
    assert len(views) == 3


def test_notifications_during_playback(
    timeline: TimelineController, clock: VirtualScheduler
) -> None:
    events: list[str] = []
    timeline.subscribe(lambda v: events.append(f"{v.state.value}:{v.cursor}"))
    timeline.on_playback_end(lambda v: events.append("end"))
    timeline.start("aab")
    timeline.play()
    clock.advance(AAB_TOTAL * BASE)

    assert events[0] == "ready:0"
    assert events[1] == "playing:0"
    assert events[-2] == f"ready:{AAB_TOTAL - 1}"
    assert events[-1] == "end"
    assert len(events) == 2 + (AAB_TOTAL - 1) + 1


def test_constructor_validates_timing(clock: VirtualScheduler) -> None:
    with pytest.raises(ValueError):
        TimelineController(clock, base_interval_ms=0)
    with pytest.raises(ValueError):
        TimelineController(clock, base_interval_ms=BASE, speed=-1)
    with pytest.raises(ValueError):
        TimelineController(clock, base_interval_ms=BASE, speed=math.nan)


def test_asyncio_playback_reaches_answer() -> None:
    async def main() -> TimelineController:
        timeline = TimelineController(base_interval_ms=1, speed=1.0)
        finished = asyncio.Event()
        timeline.on_playback_end(lambda _v: finished.set())
        timeline.start("abcab")
        assert timeline.play() is True
        await asyncio.wait_for(finished.wait(), timeout=5)
        return timeline

    timeline = asyncio.run(main())
    assert timeline.is_at_end
    assert timeline.current_snapshot.best_substring == "abc"
