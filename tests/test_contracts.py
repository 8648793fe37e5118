"""Schema tests for the JSON export contracts."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from windowtrace.core.contracts.snapshot import SnapshotRecord, TraceRecord
from windowtrace.core.trace.engine import generate_trace
from windowtrace.core.trace.snapshot import Phase


def test_trace_record_mirrors_engine_output() -> None:
    """A TraceRecord carries one step per snapshot plus the final answer."""
    steps = generate_trace("pwwkew")
    record = TraceRecord.from_trace(steps)

    assert record.kind == "trace.v1"
    assert record.version == "1.0.0"
    assert record.input_string == "pwwkew"
    assert record.best_substring == "wke"
    assert record.best_length == 3
    assert [s.index for s in record.steps] == list(range(len(steps)))
    assert [s.phase for s in record.steps] == [s.phase for s in steps]


def test_snapshot_record_materializes_derived_fields() -> None:
    """Window, distinct characters and best substring are written out explicitly."""
    steps = generate_trace("abca")
    detect_index = next(i for i, s in enumerate(steps) if s.phase is Phase.DETECT_DUPLICATE)
    rec = SnapshotRecord.from_snapshot(detect_index, steps[detect_index])

    assert rec.current_window == "abca"
    assert rec.window_chars == ["a", "b", "c"]
    assert rec.duplicate_char == "a"
    assert rec.title == Phase.DETECT_DUPLICATE.title
    assert rec.best_substring == "abc"


def test_initialize_record_allows_parked_pointer() -> None:
    """The INITIALIZE snapshot serializes with right_pointer == -1."""
    rec = SnapshotRecord.from_snapshot(0, generate_trace("ab")[0])
    assert rec.right_pointer == -1
    assert rec.current_window == ""
    assert rec.window_chars == []


def test_json_uses_phase_values() -> None:
    """Phases serialize as their string values."""
    payload = json.loads(TraceRecord.from_trace(generate_trace("aab")).model_dump_json())
    assert payload["steps"][0]["phase"] == "initialize"
    assert "detect_duplicate" in {s["phase"] for s in payload["steps"]}


def test_inconsistent_best_is_rejected() -> None:
    """best_length must match the best substring."""
    with pytest.raises(ValidationError):
        SnapshotRecord(
            index=0,
            phase=Phase.UPDATE_BEST,
            title="x",
            left_pointer=0,
            right_pointer=1,
            current_window="ab",
            window_chars=["a", "b"],
            best_length=3,
            best_substring="ab",
        )


def test_inconsistent_window_chars_are_rejected() -> None:
    """window_chars must be exactly the distinct characters of the window."""
    with pytest.raises(ValidationError):
        SnapshotRecord(
            index=0,
            phase=Phase.MOVE_RIGHT,
            title="x",
            left_pointer=0,
            right_pointer=1,
            current_window="ab",
            window_chars=["a"],
            best_length=1,
            best_substring="a",
        )


def test_kind_requires_dotted_suffix() -> None:
    """The kind label keeps the `<name>.v<major>` convention."""
    steps = generate_trace("a")
    data = TraceRecord.from_trace(steps).model_dump()
    data["kind"] = "trace"
    with pytest.raises(ValidationError):
        TraceRecord.model_validate(data)


def test_empty_trace_cannot_be_exported() -> None:
    """from_trace refuses an empty sequence."""
    with pytest.raises(ValueError):
        TraceRecord.from_trace(())
