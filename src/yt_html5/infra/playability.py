"""Infrastructure: a table-driven playability oracle.

Browsers answer ``HTMLMediaElement.canPlayType`` with ``"probably"``,
``"maybe"`` or ``""``.  Outside a browser there is nothing to ask, so
:class:`StaticPlayabilityOracle` reproduces the answers a current
desktop browser gives for the container types YouTube serves.

Rules
-----
* No I/O — the table is static.
* Answers only for ``audio/*`` and ``video/*``; anything else gets
  ``None`` ("cannot answer").
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from yt_html5.core.models import Playability
from yt_html5.core.stream_records import parse_codecs

# Container support without codec information.  A bare container type
# never earns "probably" from a browser.
_BROWSER_CONTAINERS: Mapping[str, Playability] = MappingProxyType({
    "video/mp4": Playability.MAYBE,
    "video/webm": Playability.MAYBE,
    "video/ogg": Playability.MAYBE,
    "audio/mp4": Playability.MAYBE,
    "audio/webm": Playability.MAYBE,
    "audio/ogg": Playability.MAYBE,
    "audio/mpeg": Playability.MAYBE,
    "audio/wav": Playability.MAYBE,
    "video/3gpp": Playability.NO,
    "video/x-flv": Playability.NO,
})

_BROWSER_CODECS: tuple[str, ...] = ("avc1", "vp8", "vp9", "vp09", "av01", "mp4a", "opus", "vorbis", "flac", "mp3")


class StaticPlayabilityOracle:
    """Answer ``canPlayType`` questions from a fixed table.

    Parameters
    ----------
    containers:
        ``mime → verdict`` overrides merged over the built-in table.
    """

    def __init__(self, containers: Mapping[str, Playability | str] | None = None) -> None:
        table: dict[str, Playability] = dict(_BROWSER_CONTAINERS)
        for mime, verdict in (containers or {}).items():
            table[mime.lower()] = Playability(verdict)
        self._table = table

    def __call__(self, mime: str) -> Playability | None:
        base = mime.split(";", 1)[0].strip().lower()
        if not base.startswith(("audio/", "video/")):
            return None

        verdict = self._table.get(base, Playability.NO)
        if verdict is not Playability.MAYBE:
            return verdict

        codecs = parse_codecs(mime)
        if codecs and all(codec.lower().startswith(_BROWSER_CODECS) for codec in codecs):
            return Playability.PROBABLY
        return verdict
