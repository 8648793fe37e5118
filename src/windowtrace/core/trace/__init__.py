"""Trace engine entry points.

- :func:`generate_trace`: input string -> immutable snapshot tuple.
- :class:`Snapshot` / :class:`Phase`: the recorded state and its step kind.
"""

from __future__ import annotations

from .engine import coerce_input, generate_trace, longest_unique_substring
from .snapshot import Phase, Snapshot

__all__ = ["Phase", "Snapshot", "coerce_input", "generate_trace", "longest_unique_substring"]
