# src/windowtrace/cli.py
"""
windowtrace Command Line Interface (CLI).

This module implements the terminal front end using `typer` and `rich`. It is
the collaborator that feeds input strings into the timeline controller and
renders the snapshots it exposes; all algorithm state lives in
``windowtrace.core``.

Features
--------
- **Trace Table**: Print every snapshot of a run, or the whole trace as JSON.
- **Auto-Play**: Replay a trace on a real-time timer at a chosen speed.
- **Explore**: Step forward and backward interactively.
- **Inputs**: Preset examples and random strings that favour repeats.

Usage
-----
    $ windowtrace trace abcabcbb
    $ windowtrace play pwwkew --speed 2
    $ windowtrace explore bbbbb
    $ windowtrace examples
"""

from __future__ import annotations

import asyncio
import random
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from windowtrace.core.contracts.snapshot import TraceRecord
from windowtrace.core.inputs import EXAMPLES, random_input, validate_input
from windowtrace.core.timeline.controller import TimelineController, TimelineView
from windowtrace.core.timeline.scheduler import VirtualScheduler
from windowtrace.core.trace.engine import generate_trace, longest_unique_substring
from windowtrace.core.trace.snapshot import Phase, Snapshot

# Ensure env vars (like LOG_LEVEL) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="windowtrace: Step through the longest-substring-without-repeats sliding window.",
    rich_markup_mode="markdown",
)
console = Console()

SPEED_PRESETS: tuple[float, ...] = (0.5, 1.0, 1.5, 2.0)
_SPEED_HELP = (
    "Playback speed multiplier (presets: "
    + ", ".join(f"{s:g}x" for s in SPEED_PRESETS)
    + "). Defaults to WINDOWTRACE_DEFAULT_SPEED."
)

_EXPLORE_KEYS: dict[str, str] = {
    "n": "next",
    "p": "previous",
    "a": "play to end",
    "r": "restart",
    "q": "quit",
}

_PHASE_STYLES: dict[Phase, str] = {
    Phase.INITIALIZE: "white",
    Phase.MOVE_RIGHT: "cyan",
    Phase.DETECT_DUPLICATE: "red",
    Phase.MOVE_LEFT: "yellow",
    Phase.UPDATE_BEST: "green",
}


# --------------------------------------------------------------------------- #
# Helpers: Input
# --------------------------------------------------------------------------- #


def _resolve_input(text: str | None, validate: bool, announce: bool = True) -> str:
    """
    Helper: Pick the string to trace and enforce the front-end input rules.

    A missing argument falls back to a random string. Rejected input ends the
    command with exit code 1 before anything reaches the timeline.
    """
    if text is None:
        text = random_input()
        if announce:
            console.print(f"[dim]Random input: {text}[/dim]")

    if validate:
        checked = validate_input(text)
        if checked.is_err():
            console.print(f"[bold red]❌ Invalid input:[/bold red] {checked.unwrap_err()}")
            raise typer.Exit(code=1)
    return text


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _char_row(snap: Snapshot) -> Text:
    row = Text()
    for i, ch in enumerate(snap.input_string):
        in_window = snap.left_pointer <= i <= snap.right_pointer
        if in_window and ch == snap.duplicate_char:
            style = "bold white on red"
        elif in_window:
            style = "bold black on cyan"
        else:
            style = "dim"
        row.append(f" {ch} ", style=style)
    return row


def _pointer_row(snap: Snapshot) -> Text:
    row = Text()
    for i in range(len(snap.input_string)):
        marker = ""
        if i == snap.left_pointer:
            marker += "L"
        if i == snap.right_pointer:
            marker += "R"
        row.append(marker.center(3), style="bold magenta")
    return row


def _format_chars(chars: frozenset[str]) -> str:
    return "{" + ", ".join(sorted(chars)) + "}"


def _render_view(view: TimelineView) -> None:
    """
    Helper: Draw the snapshot under the cursor as a Rich panel.

    Used as the "state changed" listener for `play` and `explore`, so every
    navigation step produces exactly one panel.
    """
    snap = view.snapshot
    step = (view.cursor or 0) + 1
    style = _PHASE_STYLES[snap.phase]

    lines: list[Text] = [
        _char_row(snap),
        _pointer_row(snap),
        Text(""),
        Text(snap.phase.explanation, style="italic"),
        Text(
            f"Window: '{snap.current_window}' (length {snap.window_length})  "
            f"{_format_chars(snap.window_chars)}"
        ),
        Text(f"Best:   '{snap.best_substring}' (length {snap.best_length})"),
    ]
    if snap.duplicate_char is not None:
        lines.append(Text(f"Duplicate: '{snap.duplicate_char}'", style="bold red"))

    console.print(
        Panel(
            Group(*lines),
            title=f"[bold {style}]Step {step}/{view.total}: {snap.phase.title}[/bold {style}]",
            border_style=style,
        )
    )


def _render_table(trace: tuple[Snapshot, ...]) -> None:
    """Helper: Print the whole trace as one table row per snapshot."""
    table = Table(title=f"Trace for '{escape(trace[0].input_string)}'", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Phase")
    table.add_column("L", justify="right")
    table.add_column("R", justify="right")
    table.add_column("Window")
    table.add_column("Chars")
    table.add_column("Best")

    for i, snap in enumerate(trace):
        style = _PHASE_STYLES[snap.phase]
        phase_label = snap.phase.title
        if snap.duplicate_char is not None:
            phase_label += f" ('{snap.duplicate_char}')"
        table.add_row(
            str(i + 1),
            f"[{style}]{phase_label}[/{style}]",
            str(snap.left_pointer),
            str(snap.right_pointer),
            escape(snap.current_window),
            escape(_format_chars(snap.window_chars)),
            escape(f"{snap.best_substring} ({snap.best_length})"),
        )
    console.print(table)


def _render_answer(snap: Snapshot) -> None:
    console.print(
        Panel(
            "Longest substring without repeats: "
            f"[bold green]'{escape(snap.best_substring)}'[/bold green] (length {snap.best_length})",
            title="Answer",
            border_style="green",
        )
    )


# --------------------------------------------------------------------------- #
# Helpers: Playback
# --------------------------------------------------------------------------- #


async def _autoplay(controller: TimelineController) -> None:
    """Run the controller's timer on the current event loop until playback ends."""
    finished = asyncio.Event()
    unsubscribe = controller.on_playback_end(lambda _view: finished.set())
    try:
        if controller.play():
            await finished.wait()
    finally:
        unsubscribe()


def _play_to_end(controller: TimelineController, scheduler: VirtualScheduler) -> None:
    """Drain the remaining steps instantly on the simulated clock."""
    if not controller.play():
        console.print("[dim]Already at the last step.[/dim]")
        return
    remaining = len(controller.sequence) - 1 - (controller.cursor or 0)
    scheduler.advance(remaining * controller.period_ms)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #

InputArg = Annotated[
    str | None,
    typer.Argument(help="String to analyse. A random string is used when omitted."),
]
NoValidateOpt = Annotated[
    bool,
    typer.Option(
        "--no-validate",
        help="Skip the lowercase a-z / length checks and trace the raw text.",
    ),
]


@app.command()  # type: ignore[misc]
def trace(
    input_string: InputArg = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Emit the trace as JSON instead of a table."),
    ] = False,
    no_validate: NoValidateOpt = False,
) -> None:
    """
    Print every snapshot of the sliding-window run for a string.
    """
    text = _resolve_input(input_string, validate=not no_validate, announce=not as_json)
    steps = generate_trace(text)

    if as_json:
        typer.echo(TraceRecord.from_trace(steps).model_dump_json(indent=2))
        return

    _render_table(steps)
    _render_answer(steps[-1])


@app.command()  # type: ignore[misc]
def play(
    input_string: InputArg = None,
    speed: Annotated[
        float | None,
        typer.Option(
            "--speed",
            "-s",
            help=_SPEED_HELP,
        ),
    ] = None,
    interval: Annotated[
        float | None,
        typer.Option(
            "--interval",
            help="Milliseconds per step at 1x speed (defaults to WINDOWTRACE_BASE_INTERVAL_MS).",
        ),
    ] = None,
    no_validate: NoValidateOpt = False,
) -> None:
    """
    Auto-play the trace in the terminal, one snapshot per tick.
    """
    text = _resolve_input(input_string, validate=not no_validate)

    try:
        controller = TimelineController(base_interval_ms=interval)
    except ValueError as e:
        console.print(f"[bold red]❌ Invalid interval:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if speed is not None and not controller.set_speed(speed):
        console.print(f"[bold red]❌ Invalid speed:[/bold red] {speed} (must be > 0)")
        raise typer.Exit(code=1)

    console.print(
        Panel.fit(
            f"[bold cyan]windowtrace[/bold cyan]\n"
            f"Playing: [u]{escape(text)}[/u] at {controller.speed:g}x",
            border_style="cyan",
        )
    )

    controller.subscribe(_render_view)
    controller.start(text)
    asyncio.run(_autoplay(controller))
    _render_answer(controller.current_snapshot)


@app.command()  # type: ignore[misc]
def explore(
    input_string: InputArg = None,
    no_validate: NoValidateOpt = False,
) -> None:
    """
    Step through the trace interactively.

    Commands: `n` next, `p` previous, `a` play to end, `r` restart, `q` quit.
    `r` reloads the same input at step 1 instead of clearing it, since the
    prompt has no separate way to enter a new string.
    """
    text = _resolve_input(input_string, validate=not no_validate)

    scheduler = VirtualScheduler()
    controller = TimelineController(scheduler=scheduler)
    controller.subscribe(_render_view)
    controller.start(text)

    hint = "  ".join(f"[bold]{k}[/bold] {label}" for k, label in _EXPLORE_KEYS.items())
    while True:
        try:
            choice = Prompt.ask(hint, choices=list(_EXPLORE_KEYS), default="n", console=console)
        except EOFError:
            break

        if choice == "q":
            break
        if choice == "n":
            if not controller.step_forward():
                console.print("[dim]Already at the last step.[/dim]")
        elif choice == "p":
            if not controller.step_backward():
                console.print("[dim]Already at the first step.[/dim]")
        elif choice == "a":
            _play_to_end(controller, scheduler)
        elif choice == "r":
            controller.start(text)

    console.print("[dim]Bye.[/dim]")


@app.command()  # type: ignore[misc]
def examples() -> None:
    """
    List the preset example strings with their answers.
    """
    table = Table(title="Examples")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Input")
    table.add_column("Answer", style="green")
    table.add_column("Length", justify="right")
    for i, value in enumerate(EXAMPLES, start=1):
        answer = longest_unique_substring(value)
        table.add_row(str(i), value, answer, str(len(answer)))
    console.print(table)


@app.command(name="random")  # type: ignore[misc]
def random_command(
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed for a reproducible string."),
    ] = None,
) -> None:
    """
    Print a random lowercase input string.
    """
    typer.echo(random_input(random.Random(seed)))


if __name__ == "__main__":
    app()
