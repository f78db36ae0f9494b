"""CLI application entry point and command routing for yt-html5.

This module is the **sole error boundary** for the entire application.
It catches :class:`~yt_html5.exceptions.YtHtml5Error`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core
  loader and the infrastructure adapters.
* Diagnostics go to stderr through the console proxy; only the chosen
  source URL is written to stdout, so the command composes in pipes.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace

from yt_html5.cli import exit_codes
from yt_html5.cli.console import configure_logging, console
from yt_html5.exceptions import YtHtml5Error
from yt_html5.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The CLI supports:
    * ``yt-html5 <url-or-id> [options]`` — rank streams, print the winner
    * ``yt-html5 doctor``                 — environment diagnostics
    * ``yt-html5 --version``
    """
    parser = argparse.ArgumentParser(
        prog="yt-html5",
        description="Pick a playable source URL for a YouTube video.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="YouTube URL or video id, or 'doctor' to run diagnostics.",
    )
    parser.add_argument(
        "-f",
        "--formats",
        default=None,
        help=(
            "Allowed format labels, comma separated (e.g. 720p,1080p), or '*'. "
            "Audio-only labels come from the measured bitrate (e.g. 130kbps), "
            "not the nominal itag rate, as shown in the candidate table."
        ),
    )
    parser.add_argument(
        "--with-audio",
        action="store_true",
        default=None,
        help="Only accept streams that carry audio.",
    )
    parser.add_argument(
        "--with-video",
        action="store_true",
        default=None,
        help="Only accept streams that carry video.",
    )
    parser.add_argument(
        "--kind",
        choices=("video", "audio"),
        default=None,
        help="Only accept streams of this media kind.",
    )
    parser.add_argument(
        "--pick",
        action="store_true",
        help="Choose the stream interactively instead of taking the best one.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Emit debug logs on stderr.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _validate_target(value: str) -> str:
    """Raise :class:`InvalidURLError` for empty input."""
    from yt_html5.exceptions import InvalidURLError

    stripped = value.strip()
    if not stripped:
        raise InvalidURLError("URL or video id must not be empty.")
    return stripped


def _handle_resolve(args: argparse.Namespace) -> int:
    """Resolve one video and print the chosen source URL.

    Flow:
    1. Build loader options from the environment, then apply CLI flags.
    2. Wire the yt-dlp transport and the static playability oracle.
    3. Attach the spinner, plus the interactive picker when ``--pick``.
    4. Load a single in-memory target and report the outcome.
    """
    from yt_html5.cli.progress import RichStatusHooks
    from yt_html5.cli.stream_prompt import display_candidates, prompt_stream_selection
    from yt_html5.config import LoaderOptions, parse_formats
    from yt_html5.core.loader import SourceLoader
    from yt_html5.core.targets import MediaTarget
    from yt_html5.infra.playability import StaticPlayabilityOracle
    from yt_html5.infra.ytdlp_transport import YtDlpTransport

    url = _validate_target(args.target)

    options = LoaderOptions.from_env()
    if args.formats is not None:
        options = replace(options, formats=parse_formats(args.formats))
    if args.with_audio:
        options = replace(options, with_audio=True)
    if args.with_video:
        options = replace(options, with_video=True)

    loader = SourceLoader(
        YtDlpTransport(),
        options,
        oracle=StaticPlayabilityOracle(),
    )
    RichStatusHooks().attach(loader.hooks)

    if args.pick:
        def _pick(selected: object, _target: object, ranked: list) -> object:
            if not ranked:
                return selected
            return prompt_stream_selection(url, ranked)

        loader.hooks.add_filter("video.stream", _pick)

    target = MediaTarget(attributes={options.attribute: url}, media_kind=args.kind)
    result = loader.load_single(target)

    if result is None:
        return exit_codes.NO_STREAM
    if result.error is not None:
        raise result.error

    if not args.pick:
        display_candidates(result.video_id, result.candidates)

    if result.source is None:
        console.print("[yellow]No stream matched the requested constraints.[/yellow]")
        return exit_codes.NO_STREAM

    print(result.source)
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from yt_html5.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the yt-html5 CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    configure_logging(args.verbose)

    if args.target.lower() == "doctor":
        return _handle_doctor()

    return _handle_resolve(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except YtHtml5Error as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
