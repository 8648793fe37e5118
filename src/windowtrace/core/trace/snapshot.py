"""
Snapshot and Phase definitions for the sliding-window trace.

A :class:`Snapshot` is the immutable record of the algorithm state at one step.
It is separated from ``engine.py`` so the timeline controller and renderers can
depend on the data shape without pulling in the algorithm itself.

Design Notes
------------
- **Immutability**: snapshots are ``frozen=True`` dataclasses; the engine is the
  only writer and everything downstream is a reader.
- **Derived fields**: ``current_window``, ``window_chars`` and ``best_substring``
  are properties computed from the stored pointers, so they cannot disagree
  with ``left_pointer``/``right_pointer``/``best_length``.
- **Parked start**: the INITIALIZE snapshot uses ``left=0, right=-1``, which
  yields an empty window before the right pointer has visited anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    """Kind of step a snapshot represents within the sliding-window cycle."""

    INITIALIZE = "initialize"
    MOVE_RIGHT = "move_right"
    DETECT_DUPLICATE = "detect_duplicate"
    MOVE_LEFT = "move_left"
    UPDATE_BEST = "update_best"

    @property
    def title(self) -> str:
        """Short heading shown above the rendered step."""
        return _TITLES[self]

    @property
    def explanation(self) -> str:
        """One-sentence description of what happened in this step."""
        return _EXPLANATIONS[self]


_TITLES: dict[Phase, str] = {
    Phase.INITIALIZE: "Initialize window",
    Phase.MOVE_RIGHT: "Move right pointer",
    Phase.DETECT_DUPLICATE: "Duplicate detected",
    Phase.MOVE_LEFT: "Move left pointer",
    Phase.UPDATE_BEST: "Update longest substring",
}

_EXPLANATIONS: dict[Phase, str] = {
    Phase.INITIALIZE: (
        "Set both pointers at the start of the string and prepare an empty window."
    ),
    Phase.MOVE_RIGHT: (
        "Advance the right pointer by one to extend the window, "
        "then check whether it introduced a repeated character."
    ),
    Phase.DETECT_DUPLICATE: (
        "The new character is already inside the window, so the left pointer must move."
    ),
    Phase.MOVE_LEFT: (
        "Move the left pointer just past the earlier copy of the repeated character "
        "so the window holds unique characters again."
    ),
    Phase.UPDATE_BEST: (
        "The window is longer than the best seen so far; record it as the new answer."
    ),
}


@dataclass(frozen=True, slots=True)
class Snapshot:
    """
    Immutable record of one step of the sliding-window algorithm.

    Attributes
    ----------
    input_string : str
        The full source string; identical across every snapshot of a trace.
    left_pointer : int
        Inclusive start index of the current window.
    right_pointer : int
        Inclusive end index of the current window. Only the INITIALIZE
        snapshot has ``right_pointer < left_pointer``.
    best_start : int
        Start index of the longest duplicate-free substring found so far.
    best_length : int
        Length of that substring (0 until the first character is scanned).
    phase : Phase
        Which step of the cycle produced this snapshot.
    duplicate_char : str | None
        The character that triggered detection; set only for DETECT_DUPLICATE.
    """

    input_string: str
    left_pointer: int
    right_pointer: int
    best_start: int
    best_length: int
    phase: Phase
    duplicate_char: str | None = None

    def __post_init__(self) -> None:
        is_duplicate = self.phase is Phase.DETECT_DUPLICATE
        if is_duplicate != (self.duplicate_char is not None):
            raise ValueError("duplicate_char must be set exactly when phase is DETECT_DUPLICATE")

    @classmethod
    def empty(cls) -> Snapshot:
        """Return the default snapshot used when no trace is loaded."""
        return cls(
            input_string="",
            left_pointer=0,
            right_pointer=-1,
            best_start=0,
            best_length=0,
            phase=Phase.INITIALIZE,
        )

    @property
    def current_window(self) -> str:
        """Substring bounded (inclusively) by the two pointers."""
        return self.input_string[self.left_pointer : self.right_pointer + 1]

    @property
    def window_chars(self) -> frozenset[str]:
        """Set of distinct characters in the current window."""
        return frozenset(self.current_window)

    @property
    def window_length(self) -> int:
        return max(0, self.right_pointer - self.left_pointer + 1)

    @property
    def best_substring(self) -> str:
        """Longest duplicate-free substring found up to this step."""
        return self.input_string[self.best_start : self.best_start + self.best_length]


__all__ = ["Phase", "Snapshot"]
