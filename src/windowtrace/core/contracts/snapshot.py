"""JSON export contracts for traces.

This module defines two Pydantic v2 models:

- `SnapshotRecord`: one snapshot flattened for serialization, with the derived
  fields (`current_window`, `window_chars`, `best_substring`) materialized.
- `TraceRecord`   : the whole trace for one input plus its final answer.

Both carry a `kind` label and a semantic schema `version`, so consumers can
detect shape changes. Records are built from engine snapshots and checked on
construction; they are an output format only, nothing reads them back into a
timeline.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator

from windowtrace.core.trace.snapshot import Phase, Snapshot

Semver = Annotated[
    str,
    Field(
        pattern=r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:[-+][0-9A-Za-z\.-]+)?$",
        description="Semantic version (MAJOR.MINOR.PATCH), optional pre-release/build.",
    ),
]


class _Record(BaseModel):
    kind: str = Field(description="Short machine label, e.g. 'snapshot.v1'")
    version: Semver = Field(default="1.0.0", description="Schema version (semver)")

    @field_validator("kind")
    @classmethod
    def _must_have_dot(cls, v: str) -> str:
        """Keep a `<name>.v<major>` style label."""
        if "." not in v:
            raise ValueError("kind should include a dotted suffix, e.g., 'snapshot.v1'")
        return v


class SnapshotRecord(_Record):
    """Serializable form of a single :class:`Snapshot`."""

    kind: str = Field(default="snapshot.v1")

    index: int = Field(ge=0, description="Position of the snapshot within its trace")
    phase: Phase
    title: str
    left_pointer: int = Field(ge=0)
    right_pointer: int = Field(ge=-1)
    current_window: str
    window_chars: list[str] = Field(
        default_factory=list, description="Distinct window characters in order of appearance"
    )
    best_length: int = Field(ge=0)
    best_substring: str
    duplicate_char: str | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> SnapshotRecord:
        if self.best_length != len(self.best_substring):
            raise ValueError("best_length must equal len(best_substring)")
        if sorted(self.window_chars) != sorted(set(self.current_window)):
            raise ValueError("window_chars must be the distinct characters of current_window")
        return self

    @classmethod
    def from_snapshot(cls, index: int, snap: Snapshot) -> SnapshotRecord:
        window = snap.current_window
        return cls(
            index=index,
            phase=snap.phase,
            title=snap.phase.title,
            left_pointer=snap.left_pointer,
            right_pointer=snap.right_pointer,
            current_window=window,
            window_chars=list(dict.fromkeys(window)),
            best_length=snap.best_length,
            best_substring=snap.best_substring,
            duplicate_char=snap.duplicate_char,
        )


class TraceRecord(_Record):
    """Serializable form of a complete trace."""

    kind: str = Field(default="trace.v1")

    input_string: str
    best_length: int = Field(ge=0)
    best_substring: str
    steps: list[SnapshotRecord] = Field(min_length=1)

    @classmethod
    def from_trace(cls, trace: Sequence[Snapshot]) -> TraceRecord:
        if not trace:
            raise ValueError("a trace always holds at least one snapshot")
        final = trace[-1]
        return cls(
            input_string=final.input_string,
            best_length=final.best_length,
            best_substring=final.best_substring,
            steps=[SnapshotRecord.from_snapshot(i, s) for i, s in enumerate(trace)],
        )


__all__ = ["Semver", "SnapshotRecord", "TraceRecord"]
