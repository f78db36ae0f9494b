"""``yt-html5 doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment satisfies yt-html5's requirements.

This module lives in the CLI layer — it renders via Rich and falls
back to plain stderr output when Rich is missing.
"""

from __future__ import annotations

import platform
import sys

from yt_html5.cli import exit_codes
from yt_html5.cli.console import console
from yt_html5.version import __version__

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    major, minor = sys.version_info[:2]
    ok = major >= 3 and minor >= 10
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _ytdlp_version_check() -> Check:
    """Return (label, value, status) for the yt-dlp version row."""
    try:
        from yt_dlp.version import __version__ as ydl_ver

        return "yt-dlp", ydl_ver, "[green]OK[/green]"
    except ImportError:
        pass

    # Fallback: yt-dlp installed but version submodule unavailable.
    try:
        import yt_dlp  # noqa: F401

        return "yt-dlp", "unknown", "[green]OK[/green]"
    except ImportError:
        return "yt-dlp", "NOT INSTALLED", "[red]FAIL[/red]"


def _questionary_check() -> Check:
    """Return (label, value, status) for questionary, needed by ``--pick`` only."""
    try:
        import questionary
    except ImportError:
        return "questionary", "not installed", "[yellow]WARN[/yellow]"
    return "questionary", getattr(questionary, "__version__", "unknown"), "[green]OK[/green]"


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    release = platform.release()
    machine = platform.machine()
    value = f"{system_display} {release} ({machine})"
    return "OS", value, "[green]OK[/green]"


def _own_version_check() -> Check:
    """Return (label, value, status) for the yt-html5 version row."""
    return "yt-html5", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nyt-html5 doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def _print_rich_doctor_table(checks: list[Check]) -> None:
    from rich.table import Table

    table = Table(
        title="yt-html5 doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)

    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _own_version_check(),
        _python_version_check(),
        _ytdlp_version_check(),
        _questionary_check(),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        import rich.table  # noqa: F401
    except ModuleNotFoundError:
        rich_available = False
    else:
        rich_available = True

    if rich_available:
        _print_rich_doctor_table(checks)
    else:
        _print_plain_doctor_table(checks)

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
