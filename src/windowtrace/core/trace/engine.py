"""
Trace engine for the longest-substring-without-repeating-characters problem.

``generate_trace`` runs the O(n) sliding-window algorithm once and records a
:class:`Snapshot` at every visible step. The result is a tuple, so a trace can
be shared freely between the timeline controller and any renderer.

Snapshot cadence
----------------
For each position of the right pointer the engine emits, in order:

1. ``MOVE_RIGHT``: the window extended to the new character, before any
   duplicate handling (so it may briefly contain a repeat).
2. ``DETECT_DUPLICATE`` then ``MOVE_LEFT``: only when the new character already
   occurs inside the window; the left pointer jumps just past its last index.
3. ``UPDATE_BEST``: only when the resolved window is strictly longer than the
   best so far. Ties keep the earlier window.

The whole trace is preceded by a single ``INITIALIZE`` snapshot with an empty
window.
"""

from __future__ import annotations

from windowtrace.core.settings import get_logger

from .snapshot import Phase, Snapshot

logger = get_logger(__name__)


def coerce_input(value: object) -> str:
    """
    Normalize an arbitrary value into the string the engine scans.

    ``None`` becomes ``""``; strings pass through untouched (no Unicode
    normalization); anything else is replaced by its ``str()`` form.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def generate_trace(text: object) -> tuple[Snapshot, ...]:
    """
    Produce the full, deterministic snapshot sequence for ``text``.

    Parameters
    ----------
    text : object
        The input string. Non-string values are coerced via :func:`coerce_input`.

    Returns
    -------
    tuple[Snapshot, ...]
        Never empty; always starts with exactly one ``INITIALIZE`` snapshot.
    """
    s = coerce_input(text)

    left = 0
    best_start = 0
    best_length = 0
    # Last index of each character; entries left of `left` are stale and ignored.
    last_seen: dict[str, int] = {}

    def snap(right: int, phase: Phase, duplicate_char: str | None = None) -> Snapshot:
        return Snapshot(
            input_string=s,
            left_pointer=left,
            right_pointer=right,
            best_start=best_start,
            best_length=best_length,
            phase=phase,
            duplicate_char=duplicate_char,
        )

    steps: list[Snapshot] = [snap(-1, Phase.INITIALIZE)]

    for right, ch in enumerate(s):
        steps.append(snap(right, Phase.MOVE_RIGHT))

        prev = last_seen.get(ch)
        if prev is not None and prev >= left:
            steps.append(snap(right, Phase.DETECT_DUPLICATE, duplicate_char=ch))
            left = prev + 1
            steps.append(snap(right, Phase.MOVE_LEFT))

        if right - left + 1 > best_length:
            best_start = left
            best_length = right - left + 1
            steps.append(snap(right, Phase.UPDATE_BEST))

        last_seen[ch] = right

    logger.debug("Generated %d snapshots for input of length %d", len(steps), len(s))
    return tuple(steps)


def longest_unique_substring(text: object) -> str:
    """Return the first longest substring of ``text`` without repeated characters."""
    return generate_trace(text)[-1].best_substring


__all__ = ["coerce_input", "generate_trace", "longest_unique_substring"]
