"""Upstream payload → raw stream variants.

Three payload shapes are understood:

* a **yt-dlp info dict** (``{"formats": [...], ...}``);
* a **player response** (``{"streamingData": {...}, ...}``), either as a
  dict or as a JSON string;
* a url-encoded **get_video_info** body, which may carry the legacy
  ``url_encoded_fmt_stream_map`` / ``adaptive_fmts`` lists and an
  embedded ``player_response`` JSON document.

Anything else raises :class:`~yt_html5.exceptions.UpstreamDecodeError`.
A recognised payload with no streams decodes to an empty list.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl

from yt_html5.core.models import RawStream
from yt_html5.core.stream_records import (
    legacy_stream_from_params,
    player_stream_from_dict,
    ytdlp_stream_from_dict,
)
from yt_html5.exceptions import UpstreamDecodeError, VideoUnavailableError

_UNPLAYABLE_STATUSES: frozenset[str] = frozenset(
    {"ERROR", "LOGIN_REQUIRED", "UNPLAYABLE", "CONTENT_CHECK_REQUIRED"}
)


def parse_uri_string(text: str) -> dict[str, str]:
    """Decode an ``a=1&b=2`` string; later duplicates win."""
    return dict(parse_qsl(text, keep_blank_values=True))


def _load_json(text: str) -> dict[str, Any]:
    try:
        value = json.loads(text)
    except ValueError as exc:
        raise UpstreamDecodeError(f"Malformed player response JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise UpstreamDecodeError("Player response JSON is not an object.")
    return value


def _dict_entries(value: object) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, Mapping)]


# ---------------------------------------------------------------------------
# Per-shape decoders
# ---------------------------------------------------------------------------

def _decode_ytdlp_info(info: Mapping[str, Any]) -> list[RawStream]:
    return [ytdlp_stream_from_dict(entry) for entry in _dict_entries(info.get("formats"))]


def _decode_player_response(player: Mapping[str, Any]) -> list[RawStream]:
    streaming = player.get("streamingData")
    if not isinstance(streaming, Mapping):
        status = player.get("playabilityStatus")
        if isinstance(status, Mapping) and status.get("status") in _UNPLAYABLE_STATUSES:
            raise VideoUnavailableError(
                str(status.get("reason") or status.get("status")),
                hint="The video may be private, removed, or geo-restricted.",
            )
        return []

    streams: list[RawStream] = []
    for key in ("formats", "adaptiveFormats"):
        streams.extend(player_stream_from_dict(entry) for entry in _dict_entries(streaming.get(key)))
    return streams


def _decode_video_info(body: str) -> list[RawStream]:
    response = parse_uri_string(body)
    streams: list[RawStream] = []

    for key, muxed in (("url_encoded_fmt_stream_map", True), ("adaptive_fmts", False)):
        encoded = response.get(key)
        if encoded:
            streams.extend(
                legacy_stream_from_params(parse_uri_string(chunk), muxed=muxed)
                for chunk in encoded.split(",")
                if chunk
            )

    player_text = response.get("player_response")
    if player_text:
        streams.extend(_decode_player_response(_load_json(player_text)))
    elif not streams:
        if response.get("status") == "fail":
            raise VideoUnavailableError(
                response.get("reason") or "Upstream reported failure.",
                hint="The video may be private, removed, or geo-restricted.",
            )
        raise UpstreamDecodeError("Response body carries no stream data.")

    return streams


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def decode_payload(payload: Any) -> list[RawStream]:
    """Decode *payload* into raw stream variants.

    Raises
    ------
    UpstreamDecodeError
        If the payload shape is not recognised or is malformed.
    VideoUnavailableError
        If the payload states that the video cannot be played.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UpstreamDecodeError(f"Response body is not UTF-8: {exc}") from exc

    if isinstance(payload, str):
        text = payload.strip()
        if not text:
            raise UpstreamDecodeError("Empty response body.")
        if text.startswith("{"):
            return _decode_player_response(_load_json(text))
        return _decode_video_info(text)

    if isinstance(payload, Mapping):
        if "streamingData" in payload or "playabilityStatus" in payload:
            return _decode_player_response(payload)
        if "player_response" in payload:
            player = payload["player_response"]
            if isinstance(player, str):
                player = _load_json(player)
            if not isinstance(player, Mapping):
                raise UpstreamDecodeError("player_response is neither JSON nor a mapping.")
            return _decode_player_response(player)
        if isinstance(payload.get("formats"), list):
            return _decode_ytdlp_info(payload)

    raise UpstreamDecodeError(
        f"Unrecognised upstream payload: {type(payload).__name__}",
        hint="Expected a yt-dlp info dict, a player response, or a get_video_info body.",
    )
