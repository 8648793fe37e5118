"""windowtrace: step-by-step visualizer for the longest-unique-substring sliding window.

The package is split into a pure trace engine (``windowtrace.core.trace``), a
timeline controller that replays a trace (``windowtrace.core.timeline``), and a
terminal front end (``windowtrace.cli``).
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
