"""yt-dlp backed implementation of :class:`~yt_html5.core.protocols.Transport`.

This module is the **only** place in the codebase that imports ``yt_dlp``.
All yt-dlp exceptions are caught here and re-raised as typed
:class:`~yt_html5.exceptions.YtHtml5Error` subclasses — nothing raw
escapes the infrastructure boundary.
"""

from __future__ import annotations

from typing import Any

import structlog

from yt_html5.exceptions import (
    EnvironmentError,
    UpstreamDecodeError,
    VideoUnavailableError,
    append_ytdlp_upgrade_suggestion,
)

log = structlog.get_logger(__name__)


class YtDlpTransport:
    """Concrete :class:`Transport` backed by the yt-dlp Python API.

    Usage::

        transport = YtDlpTransport()
        info = transport.fetch("https://www.youtube.com/watch?v=...")

    The returned payload is the raw yt-dlp info dict, which
    :func:`~yt_html5.core.response_parser.decode_payload` understands.
    """

    # Substrings in yt-dlp error messages that indicate the video itself
    # is unavailable (as opposed to a transient or extraction error).
    _UNAVAILABLE_SIGNALS: tuple[str, ...] = (
        "unavailable",
        "private video",
        "removed",
        "not available",
        "account terminated",
        "video has been removed",
        "this video is no longer available",
        "sign in to confirm your age",
    )

    def __init__(self, *, extra_opts: dict[str, Any] | None = None) -> None:
        self._extra_opts: dict[str, Any] = dict(extra_opts or {})

    def _build_opts(self) -> dict[str, Any]:
        """Return yt-dlp options suitable for metadata-only extraction."""
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "no_color": True,
            # Do not write any files to disk.
            "skip_download": True,
        }
        opts.update(self._extra_opts)
        return opts

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def fetch(self, url: str) -> dict[str, Any]:
        """Extract the info dict for *url* without downloading.

        Raises
        ------
        EnvironmentError
            When yt-dlp is not installed.
        VideoUnavailableError
            When yt-dlp reports the video as unavailable / private / removed.
        UpstreamDecodeError
            For all other extraction failures.
        """
        try:
            import yt_dlp
            import yt_dlp.utils
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc

        log.debug("transport.fetch", url=url)
        try:
            with yt_dlp.YoutubeDL(self._build_opts()) as ydl:
                info: Any = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as exc:
            self._raise_mapped(exc)
        except Exception as exc:
            raise UpstreamDecodeError(
                f"Unexpected yt-dlp error: {exc}",
            ) from exc

        if info is None:
            raise UpstreamDecodeError(
                "yt-dlp returned no metadata for the given URL.",
                hint="The URL may not point to a valid video.",
            )

        if not isinstance(info, dict):
            raise UpstreamDecodeError(
                "yt-dlp returned an unexpected data structure.",
            )

        return dict(info)  # shallow copy — isolate from yt-dlp internals

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    @classmethod
    def _raise_mapped(cls, exc: Exception) -> None:
        """Translate a yt-dlp ``DownloadError`` into a domain exception."""
        msg_lower = str(exc).lower()
        if any(signal in msg_lower for signal in cls._UNAVAILABLE_SIGNALS):
            raise VideoUnavailableError(
                str(exc),
                hint="The video may be private, removed, or geo-restricted.",
            ) from exc
        raise UpstreamDecodeError(
            str(exc),
            hint=append_ytdlp_upgrade_suggestion("YouTube may have changed its player."),
        ) from exc
