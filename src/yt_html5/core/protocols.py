"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and embedding
environments must satisfy.  Core code depends ONLY on these protocols —
never on concrete implementations — preserving the dependency inversion
principle.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from yt_html5.core.models import Playability

PlayabilityOracle = Callable[[str], Playability | str | None]
"""``(mime) -> verdict``.

Given ``"{kind}/{subtype}"`` the oracle answers ``"probably"``,
``"maybe"``, ``"no"`` (or ``""``), or ``None`` when it cannot answer.
"""


class PlaybackTarget(Protocol):
    """An element a source URL can be assigned to.

    The core never inspects a target beyond these three members.
    """

    media_kind: str | None
    """``"video"``, ``"audio"`` or ``None`` when the target accepts either."""

    def get_attribute(self, name: str) -> str | None:
        """Return the raw attribute value, or ``None`` when absent."""
        ...  # pragma: no cover

    def set_source(self, url: str) -> None:
        """Assign the winning source URL."""
        ...  # pragma: no cover


class TargetDiscovery(Protocol):
    """Supplies the targets :meth:`SourceLoader.load` processes."""

    def discover(self) -> Sequence[PlaybackTarget]:
        ...  # pragma: no cover


class Transport(Protocol):
    """Contract for network backends.

    Any object that implements :meth:`fetch` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def fetch(self, url: str) -> Any:
        """Fetch *url* and return the decoded response payload.

        The payload is one of the shapes understood by
        :func:`~yt_html5.core.response_parser.decode_payload`: a yt-dlp
        info dict, a player-response dict, or a url-encoded
        ``get_video_info`` body.

        Implementations must map all backend-specific exceptions to
        :class:`~yt_html5.exceptions.YtHtml5Error` subclasses.

        Raises
        ------
        UpstreamDecodeError
            When the request or decoding fails.
        VideoUnavailableError
            When the target video is confirmed unavailable.
        """
        ...  # pragma: no cover
