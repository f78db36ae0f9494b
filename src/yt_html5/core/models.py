"""Domain models for yt-html5.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O, zero dependencies on
external packages, and must remain pure across the entire lifecycle.

Raw upstream records are modelled as a tagged union
(:data:`RawStream`): one dataclass per known response shape, each
carrying only the fields that shape actually provides.  The adapters in
:mod:`yt_html5.core.stream_records` map every variant to the single
normalised :class:`StreamRecord`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class HookKind(str, Enum):
    """The two recognised hook kinds."""

    ACTIONS = "actions"
    FILTERS = "filters"


class HookScope(str, Enum):
    """Visibility of a registered hook."""

    SHARED = "shared"
    """Visible to every registry attached to the same shared store."""

    INSTANCE = "instance"
    """Visible only to the registry it was registered on."""


class MediaKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"
    UNKNOWN = "unknown"


class Playability(str, Enum):
    """Three-valued ``canPlayType`` answer plus ``unknown``."""

    PROBABLY = "probably"
    MAYBE = "maybe"
    NO = "no"
    UNKNOWN = "unknown"


UNKNOWN_SUBTYPE: str = "unknown"
"""MIME subtype used when the MIME string is absent or unparseable."""

ANY_FORMAT: str = "*"
"""Wildcard value for :attr:`SelectionOptions.formats`."""


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HookEntry:
    """A single registered hook.

    Identity is structural: two entries with the same name, priority and
    callback are both kept and both run.
    """

    name: str
    priority: int
    scope: HookScope
    callback: Callable[..., Any] = field(compare=False)


# ---------------------------------------------------------------------------
# Raw upstream records (tagged union)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LegacyStream:
    """Entry of the url-encoded ``url_encoded_fmt_stream_map`` / ``adaptive_fmts`` lists."""

    itag: int | None
    url: str | None
    mime_type: str | None
    """The ``type`` parameter, e.g. ``video/mp4; codecs="avc1.42001E, mp4a.40.2"``."""

    quality_label: str | None
    bitrate: int | None
    content_length: int | None
    muxed: bool
    """``True`` for entries of the muxed ``url_encoded_fmt_stream_map`` list."""

    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class PlayerStream:
    """Entry of ``player_response.streamingData.formats`` / ``adaptiveFormats``."""

    itag: int | None
    url: str | None
    mime_type: str | None
    quality_label: str | None
    bitrate: int | None
    average_bitrate: int | None
    audio_quality: str | None
    audio_channels: int | None
    content_length: int | None
    is_hls: bool = False
    is_dash_mpd: bool = False
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class YtDlpStream:
    """Entry of the ``formats`` list of a yt-dlp info dict."""

    format_id: str | None
    url: str | None
    ext: str | None
    vcodec: str | None
    """Video codec name.  ``"none"`` when the stream has no video,
    ``None`` when it has one whose codec yt-dlp could not name."""

    acodec: str | None
    """Audio codec name, with the same ``"none"`` / ``None`` split."""

    height: int | None
    fps: int | None
    tbr: float | None
    """Total bitrate in kbit/s."""

    abr: float | None
    """Audio bitrate in kbit/s."""

    filesize: int | None
    protocol: str | None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


RawStream = Union[LegacyStream, PlayerStream, YtDlpStream]


# ---------------------------------------------------------------------------
# Normalised record
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StreamRecord:
    """Canonical, derived-once view of one candidate source.

    Ranking and filtering only reorder or drop records; no field is
    edited after :func:`~yt_html5.core.stream_records.normalize_stream`
    builds it.
    """

    raw: RawStream = field(compare=False, repr=False)
    url: str
    itag: int | None
    format_label: str | None
    media_kind: MediaKind
    mime_subtype: str
    codecs: tuple[str, ...]
    has_audio: bool
    has_video: bool
    playability: Playability
    bitrate: int = 0
    audio_bitrate: int = 0
    content_length: int | None = None
    is_hls: bool = False
    is_dash_mpd: bool = False

    @property
    def mime(self) -> str:
        """``"{media_kind}/{mime_subtype}"``, the string asked of the oracle."""
        return f"{self.media_kind.value}/{self.mime_subtype}"


# ---------------------------------------------------------------------------
# Selection options
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SelectionOptions:
    """Caller constraints for one selection call.

    Defaults
    --------
    * ``formats = "*"`` — every format label is allowed.
    * ``with_audio = False`` — audio is not required.
    * ``with_video = False`` — video is not required.

    A single label string (``"1080p"``) is accepted and stored as a
    one-element set.  ``None`` means every label.
    """

    formats: str | frozenset[str] = ANY_FORMAT
    with_audio: bool = False
    with_video: bool = False

    def __post_init__(self) -> None:
        formats = self.formats
        if formats is None:
            object.__setattr__(self, "formats", ANY_FORMAT)
        elif isinstance(formats, str):
            if formats != ANY_FORMAT:
                object.__setattr__(self, "formats", frozenset({formats}))
        elif isinstance(formats, Iterable):
            object.__setattr__(self, "formats", frozenset(formats))
        else:
            raise TypeError(
                f"formats must be '*', a label or an iterable of labels, "
                f"not {type(formats).__name__}"
            )

    @property
    def restricts_formats(self) -> bool:
        return self.formats != ANY_FORMAT

    def allows_format(self, label: str | None) -> bool:
        """Return ``True`` when *label* passes the ``formats`` constraint."""
        if not self.restricts_formats:
            return True
        return label is not None and label in self.formats
