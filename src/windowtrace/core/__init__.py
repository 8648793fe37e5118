"""Core package initializer for windowtrace.

Downstream code imports from the concrete modules:
    from windowtrace.core.settings import settings, load_settings, Settings, get_logger
    from windowtrace.core.trace.engine import generate_trace
    from windowtrace.core.timeline.controller import TimelineController
"""

from __future__ import annotations

__all__ = ["__doc__"]
