from __future__ import annotations

from .controller import Listener, TimelineController, TimelineState, TimelineView
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle, VirtualScheduler

__all__ = [
    "TimelineController",
    "TimelineState",
    "TimelineView",
    "Listener",
    "Scheduler",
    "TimerHandle",
    "AsyncioScheduler",
    "VirtualScheduler",
]
