"""Candidate display and interactive stream selection for the CLI layer.

This module is responsible for:

* Rendering a Rich table of the ranked candidate streams.
* Optionally prompting the user to pick one via questionary.

All display-related logic lives here — no ranking, no fetching.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from yt_html5.cli.console import console
from yt_html5.core.models import StreamRecord
from yt_html5.exceptions import EnvironmentError, FormatSelectionError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for candidate rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms — no I/O themselves)
# ---------------------------------------------------------------------------

def _format_filesize(filesize: int | None) -> str:
    """Convert bytes to a human-readable MB string, or ``"Unknown"``."""
    if not filesize:
        return "Unknown"
    mb = filesize / (1024 * 1024)
    return f"{mb:.1f} MB"


def _format_bitrate(bitrate: int) -> str:
    """Render bits per second as ``"1234 kbps"`` or ``"—"``."""
    if bitrate <= 0:
        return "—"
    return f"{round(bitrate / 1000)} kbps"


def _format_tracks(record: StreamRecord) -> str:
    """``"A+V"``, ``"V"``, ``"A"`` or ``"?"``."""
    if record.has_audio and record.has_video:
        return "A+V"
    if record.has_video:
        return "V"
    if record.has_audio:
        return "A"
    return "?"


def _build_choice_label(index: int, record: StreamRecord) -> str:
    """Build the single-line label shown in the questionary selector.

    Format: ``"  1.  1080p      V     video/mp4    2500 kbps"``
    """
    label = record.format_label or "?"
    return (
        f"  {index + 1}.  {label:<10} {_format_tracks(record):<5} "
        f"{record.mime:<12} {_format_bitrate(record.bitrate)}"
    )


# ---------------------------------------------------------------------------
# Rich table display
# ---------------------------------------------------------------------------

def display_candidates(video_id: str, records: Sequence[StreamRecord]) -> None:
    """Print a Rich table of *records*, best first."""
    table_class = _import_rich_table()

    console.print()
    console.print(f"[bold cyan]Video:[/bold cyan]  {video_id}")
    console.print()

    table = table_class(
        title="Ranked Streams",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Format", justify="left", min_width=8)
    table.add_column("Tracks", justify="center", min_width=6)
    table.add_column("Type", justify="left", min_width=10)
    table.add_column("Playable", justify="left", min_width=8)
    table.add_column("Bitrate", justify="right", min_width=10)
    table.add_column("Size", justify="right", min_width=10)

    for i, record in enumerate(records, start=1):
        table.add_row(
            str(i),
            record.format_label or "?",
            _format_tracks(record),
            record.mime,
            record.playability.value,
            _format_bitrate(record.bitrate),
            _format_filesize(record.content_length),
        )

    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def prompt_stream_selection(
    video_id: str,
    records: Sequence[StreamRecord],
) -> StreamRecord:
    """Display *records* and let the user pick one.

    Returns
    -------
    StreamRecord
        The chosen record.

    Raises
    ------
    KeyboardInterrupt
        If the user presses Ctrl+C during selection.
    FormatSelectionError
        If the user cancels the prompt (Esc / None return).
    """
    questionary = _import_questionary()

    display_candidates(video_id, records)

    choices = [
        questionary.Choice(title=_build_choice_label(i, record), value=i)
        for i, record in enumerate(records)
    ]

    selected: int | None = questionary.select(
        "Select stream:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()  # Returns None on Ctrl+C / Esc

    if selected is None:
        raise FormatSelectionError(
            "No stream selected.",
            hint="Use arrow keys to pick a stream, then press Enter.",
        )

    return records[selected]
