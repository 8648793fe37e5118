"""
Smoke tests for package structure and availability.

Scope
-----
These tests strictly verify that the package is installed correctly in the
environment and that top-level modules are importable.
"""

from __future__ import annotations

import importlib

from windowtrace import __version__


def test_package_importable() -> None:
    """Ensure the top-level package can be imported."""
    mod = importlib.import_module("windowtrace")
    assert mod is not None


def test_version_is_set() -> None:
    """Ensure the package exposes a valid version string."""
    assert isinstance(__version__, str)
    assert len(__version__) > 0


def test_subpackages_reexport_entry_points() -> None:
    """The trace and timeline subpackages expose their main entry points."""
    trace = importlib.import_module("windowtrace.core.trace")
    timeline = importlib.import_module("windowtrace.core.timeline")
    assert callable(trace.generate_trace)
    assert hasattr(timeline, "TimelineController")
    assert hasattr(timeline, "VirtualScheduler")


def test_cli_module_exposes_app() -> None:
    """
    Ensure the CLI module exposes the Typer 'app' object.

    The presence of 'app' is required for the entry point defined in
    pyproject.toml (`windowtrace.cli:app`).
    """
    cli = importlib.import_module("windowtrace.cli")
    assert hasattr(cli, "app"), "windowtrace.cli must expose an 'app' Typer object."
