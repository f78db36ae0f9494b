"""Custom exception hierarchy for yt-html5.

All exceptions that cross layer boundaries must inherit from
:class:`YtHtml5Error`.  Raw third-party exceptions (e.g. from yt-dlp)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Exceptions raised by user-registered hook callbacks are the one
exception to the rule: they propagate unchanged to whoever triggered
the dispatch.

Hierarchy
---------
YtHtml5Error
├── InvalidHookKindError
├── InvalidURLError
├── MalformedStreamRecordError
├── UpstreamDecodeError
│   └── VideoUnavailableError
├── FormatSelectionError
└── EnvironmentError
"""

from __future__ import annotations


class YtHtml5Error(Exception):
    """Base exception for all yt-html5 errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Hooks -----------------------------------------------------------------

class InvalidHookKindError(YtHtml5Error):
    """Raised when a hook is registered under a kind other than actions/filters."""


# --- URL validation --------------------------------------------------------

class InvalidURLError(YtHtml5Error):
    """Raised when the provided URL fails validation."""


# --- Stream records --------------------------------------------------------

class MalformedStreamRecordError(YtHtml5Error):
    """Raised by record adapters when a candidate lacks a URL or identity.

    The selector catches this and drops the record; it never reaches the
    caller of :func:`~yt_html5.core.stream_selector.select_streams`.
    """


# --- Upstream / transport --------------------------------------------------

class UpstreamDecodeError(YtHtml5Error):
    """Raised when the transport fails or returns an unexpected payload."""


class VideoUnavailableError(UpstreamDecodeError):
    """Raised when the target video is unavailable (private, removed, etc.)."""


# --- Format handling -------------------------------------------------------

class FormatSelectionError(YtHtml5Error):
    """Raised when the user cancels an interactive stream selection."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(YtHtml5Error):
    """Raised when a required runtime dependency is not available."""


def append_ytdlp_upgrade_suggestion(hint: str) -> str:
    """Append yt-dlp upgrade guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also try updating yt-dlp:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    pip install --upgrade yt-dlp",
        )
    )
