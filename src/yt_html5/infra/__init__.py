"""Infrastructure layer — external system integration.

This layer wraps all interaction with yt-dlp and stands in for the
browser capabilities the core asks about.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~yt_html5.exceptions.YtHtml5Error` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from yt_html5.infra.playability import StaticPlayabilityOracle
from yt_html5.infra.ytdlp_transport import YtDlpTransport

__all__: list[str] = [
    "StaticPlayabilityOracle",
    "YtDlpTransport",
]
