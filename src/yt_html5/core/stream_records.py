"""Raw-record parsing and normalisation.

Two layers live here, both pure:

1. **Parsers** turn one upstream mapping into the matching
   :data:`~yt_html5.core.models.RawStream` variant.  They never fail; a
   missing or mistyped field simply becomes ``None``.
2. **Adapters** map a variant onto the shared intermediate
   :class:`_Fields`, and :func:`normalize_stream` derives the final
   :class:`~yt_html5.core.models.StreamRecord` from it (MIME split,
   format label, playability).

A record without a URL or without an identity raises
:class:`~yt_html5.exceptions.MalformedStreamRecordError`; the selector
drops such records.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, NamedTuple

from yt_html5.core.itags import AUDIO_CODEC_PREFIXES, ITAG_LABELS, label_for_itag
from yt_html5.core.models import (
    UNKNOWN_SUBTYPE,
    LegacyStream,
    MediaKind,
    Playability,
    PlayerStream,
    RawStream,
    StreamRecord,
    YtDlpStream,
)
from yt_html5.core.protocols import PlayabilityOracle
from yt_html5.exceptions import MalformedStreamRecordError

_MIME_RE = re.compile(r"^\s*(audio|video)(?:/([^;\s]+))?", re.IGNORECASE)
_CODECS_RE = re.compile(r"codecs\s*=\s*\"?([^\"]*)\"?", re.IGNORECASE)

# yt-dlp reports container extensions; browsers want MIME subtypes.
_EXT_TO_SUBTYPE: dict[str, str] = {
    "mp4": "mp4",
    "m4a": "mp4",
    "webm": "webm",
    "weba": "webm",
    "3gp": "3gpp",
    "mp3": "mpeg",
    "ogg": "ogg",
    "flv": "x-flv",
}


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------

def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            return int(float(value.strip()))
    except (ValueError, OverflowError):
        return None
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


# ---------------------------------------------------------------------------
# MIME helpers
# ---------------------------------------------------------------------------

def parse_mime(mime_type: str | None) -> tuple[MediaKind, str]:
    """Split a MIME string into ``(media_kind, subtype)``.

    ``"video/mp4; codecs=..."`` → ``(VIDEO, "mp4")``.  Anything that does
    not start with ``audio`` or ``video`` degrades to ``UNKNOWN``.
    """
    if not mime_type:
        return MediaKind.UNKNOWN, UNKNOWN_SUBTYPE
    match = _MIME_RE.match(mime_type)
    if match is None:
        return MediaKind.UNKNOWN, UNKNOWN_SUBTYPE
    kind = MediaKind(match.group(1).lower())
    subtype = match.group(2).lower() if match.group(2) else UNKNOWN_SUBTYPE
    return kind, subtype


def parse_codecs(mime_type: str | None) -> tuple[str, ...]:
    """Return the entries of the ``codecs=`` parameter, in order."""
    if not mime_type:
        return ()
    match = _CODECS_RE.search(mime_type)
    if match is None:
        return ()
    return tuple(part.strip() for part in match.group(1).split(",") if part.strip())


def _has_audio_codec(codecs: tuple[str, ...]) -> bool:
    return any(codec.lower().startswith(AUDIO_CODEC_PREFIXES) for codec in codecs)


def classify_playability(
    media_kind: MediaKind,
    mime_subtype: str,
    oracle: PlayabilityOracle | None,
) -> Playability:
    """Ask *oracle* whether ``"{kind}/{subtype}"`` can be played.

    ``""`` is the ``canPlayType`` spelling of "no".  A missing oracle, an
    unknown media kind, or an answer outside the three known verdicts
    yields :attr:`Playability.UNKNOWN`.
    """
    if oracle is None or media_kind is MediaKind.UNKNOWN:
        return Playability.UNKNOWN

    answer = oracle(f"{media_kind.value}/{mime_subtype}")
    if isinstance(answer, Playability):
        return answer
    if answer is None:
        return Playability.UNKNOWN

    verdict = str(answer).strip().lower()
    if verdict == "":
        return Playability.NO
    try:
        return Playability(verdict)
    except ValueError:
        return Playability.UNKNOWN


# ---------------------------------------------------------------------------
# Parsers: upstream mapping → variant
# ---------------------------------------------------------------------------

def legacy_stream_from_params(params: Mapping[str, Any], *, muxed: bool) -> LegacyStream:
    """Parse one decoded entry of ``url_encoded_fmt_stream_map``/``adaptive_fmts``."""
    return LegacyStream(
        itag=_as_int(params.get("itag")),
        url=_as_str(params.get("url")),
        mime_type=_as_str(params.get("type")),
        quality_label=_as_str(params.get("quality_label")),
        bitrate=_as_int(params.get("bitrate")),
        content_length=_as_int(params.get("clen")),
        muxed=muxed,
        raw=dict(params),
    )


def player_stream_from_dict(data: Mapping[str, Any]) -> PlayerStream:
    """Parse one entry of ``streamingData.formats``/``adaptiveFormats``."""
    return PlayerStream(
        itag=_as_int(data.get("itag")),
        url=_as_str(data.get("url")),
        mime_type=_as_str(data.get("mimeType")),
        quality_label=_as_str(data.get("qualityLabel")),
        bitrate=_as_int(data.get("bitrate")),
        average_bitrate=_as_int(data.get("averageBitrate")),
        audio_quality=_as_str(data.get("audioQuality")),
        audio_channels=_as_int(data.get("audioChannels")),
        content_length=_as_int(data.get("contentLength")),
        is_hls=_as_bool(data.get("isHLS")),
        is_dash_mpd=_as_bool(data.get("isDashMPD")),
        raw=dict(data),
    )


def _ytdlp_codec(data: Mapping[str, Any], key: str) -> str | None:
    # Missing key: track absent.  Explicit None: track present, codec unknown.
    if key not in data:
        return "none"
    value = data[key]
    return None if value is None else str(value)


def ytdlp_stream_from_dict(data: Mapping[str, Any]) -> YtDlpStream:
    """Parse one entry of a yt-dlp info dict ``formats`` list."""
    raw_fps = _as_float(data.get("fps"))
    raw_size = data.get("filesize")
    if raw_size is None:
        raw_size = data.get("filesize_approx")

    return YtDlpStream(
        format_id=_as_str(data.get("format_id")),
        url=_as_str(data.get("url")),
        ext=_as_str(data.get("ext")),
        vcodec=_ytdlp_codec(data, "vcodec"),
        acodec=_ytdlp_codec(data, "acodec"),
        height=_as_int(data.get("height")),
        fps=round(raw_fps) if raw_fps is not None else None,
        tbr=_as_float(data.get("tbr")),
        abr=_as_float(data.get("abr")),
        filesize=_as_int(raw_size),
        protocol=_as_str(data.get("protocol")),
        raw=dict(data),
    )


# ---------------------------------------------------------------------------
# Adapters: variant → intermediate fields
# ---------------------------------------------------------------------------

class _Fields(NamedTuple):
    url: str
    itag: int | None
    quality_label: str | None
    mime_type: str | None
    bitrate: int
    audio_bitrate: int
    content_length: int | None
    audio_hint: bool
    is_hls: bool
    is_dash_mpd: bool


def _require_url(url: str | None, ident: object) -> str:
    if not url:
        raise MalformedStreamRecordError(f"Stream {ident!r} has no URL.")
    return url


def _require_known_itag(itag: int | None) -> int:
    if itag is None or itag not in ITAG_LABELS:
        raise MalformedStreamRecordError(f"Unrecognised itag: {itag!r}")
    return itag


def _adapt_legacy(stream: LegacyStream) -> _Fields:
    itag = _require_known_itag(stream.itag)
    kind, _ = parse_mime(stream.mime_type)
    return _Fields(
        url=_require_url(stream.url, itag),
        itag=itag,
        quality_label=stream.quality_label,
        mime_type=stream.mime_type,
        bitrate=stream.bitrate or 0,
        audio_bitrate=(stream.bitrate or 0) if kind is MediaKind.AUDIO else 0,
        content_length=stream.content_length,
        audio_hint=stream.muxed,
        is_hls=False,
        is_dash_mpd=False,
    )


def _adapt_player(stream: PlayerStream) -> _Fields:
    itag = _require_known_itag(stream.itag)
    kind, _ = parse_mime(stream.mime_type)
    audio_bitrate = 0
    if kind is MediaKind.AUDIO:
        audio_bitrate = stream.average_bitrate or stream.bitrate or 0
    return _Fields(
        url=_require_url(stream.url, itag),
        itag=itag,
        quality_label=stream.quality_label,
        mime_type=stream.mime_type,
        bitrate=stream.bitrate or 0,
        audio_bitrate=audio_bitrate,
        content_length=stream.content_length,
        audio_hint=bool(stream.audio_quality) or bool(stream.audio_channels),
        is_hls=stream.is_hls,
        is_dash_mpd=stream.is_dash_mpd,
    )


def _ytdlp_mime(stream: YtDlpStream) -> str | None:
    has_video = stream.vcodec != "none"
    has_audio = stream.acodec != "none"
    if has_video:
        kind = "video"
    elif has_audio:
        kind = "audio"
    else:
        return None

    subtype = _EXT_TO_SUBTYPE.get((stream.ext or "").lower(), stream.ext or UNKNOWN_SUBTYPE)
    codecs = [codec for codec in (stream.vcodec, stream.acodec) if codec and codec != "none"]
    return f'{kind}/{subtype}; codecs="{", ".join(codecs)}"'


def _ytdlp_quality_label(stream: YtDlpStream) -> str | None:
    if stream.vcodec != "none" and stream.height:
        suffix = str(stream.fps) if stream.fps and stream.fps > 30 else ""
        return f"{stream.height}p{suffix}"
    return None


def _adapt_ytdlp(stream: YtDlpStream) -> _Fields:
    if not stream.format_id:
        raise MalformedStreamRecordError("yt-dlp format has no format_id.")
    itag = int(stream.format_id) if stream.format_id.isdigit() else None
    return _Fields(
        url=_require_url(stream.url, stream.format_id),
        itag=itag,
        quality_label=_ytdlp_quality_label(stream),
        mime_type=_ytdlp_mime(stream),
        bitrate=int((stream.tbr or 0) * 1000),
        audio_bitrate=int((stream.abr or 0) * 1000),
        content_length=stream.filesize,
        audio_hint=stream.acodec != "none",
        is_hls=(stream.protocol or "").startswith("m3u8"),
        is_dash_mpd=stream.protocol == "http_dash_segments",
    )


def _adapt(raw: RawStream) -> _Fields:
    if isinstance(raw, PlayerStream):
        return _adapt_player(raw)
    if isinstance(raw, LegacyStream):
        return _adapt_legacy(raw)
    if isinstance(raw, YtDlpStream):
        return _adapt_ytdlp(raw)
    raise MalformedStreamRecordError(f"Unsupported record type: {type(raw).__name__}")


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------

def _format_label(fields: _Fields, has_audio: bool, has_video: bool) -> str | None:
    if fields.quality_label:
        return fields.quality_label
    if has_audio and not has_video and fields.audio_bitrate > 0:
        return f"{round(fields.audio_bitrate / 1000)}kbps"
    return label_for_itag(fields.itag)


def normalize_stream(raw: RawStream, oracle: PlayabilityOracle | None = None) -> StreamRecord:
    """Derive the canonical :class:`StreamRecord` for one raw record.

    Raises
    ------
    MalformedStreamRecordError
        If the record has no URL or no recognisable identity.
    """
    fields = _adapt(raw)
    media_kind, mime_subtype = parse_mime(fields.mime_type)
    codecs = parse_codecs(fields.mime_type)

    has_video = media_kind is MediaKind.VIDEO
    has_audio = (
        media_kind is MediaKind.AUDIO
        or fields.audio_hint
        or _has_audio_codec(codecs)
    )

    return StreamRecord(
        raw=raw,
        url=fields.url,
        itag=fields.itag,
        format_label=_format_label(fields, has_audio, has_video),
        media_kind=media_kind,
        mime_subtype=mime_subtype,
        codecs=codecs,
        has_audio=has_audio,
        has_video=has_video,
        playability=classify_playability(media_kind, mime_subtype, oracle),
        bitrate=fields.bitrate,
        audio_bitrate=fields.audio_bitrate,
        content_length=fields.content_length,
        is_hls=fields.is_hls,
        is_dash_mpd=fields.is_dash_mpd,
    )
