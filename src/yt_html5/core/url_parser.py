"""YouTube URL → video identifier."""

from __future__ import annotations

import re

_YOUTUBE_ID_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?(?:m\.)?"
    r"(?:youtu\.be/"
    r"|(?:youtube-nocookie\.com/|youtube\.com/)"
    r"(?:(?:watch)?\?(?:.*&)?vi?=|(?:embed|v|vi|user|shorts)/))"
    r"([a-zA-Z0-9\-_]*)"
)


def url_to_id(url: str) -> str:
    """Extract the video id from a YouTube URL.

    Inputs matching no known URL pattern are returned unchanged, so a bare
    id passes straight through.

    >>> url_to_id("https://youtu.be/dQw4w9WgXcQ")
    'dQw4w9WgXcQ'
    >>> url_to_id("dQw4w9WgXcQ")
    'dQw4w9WgXcQ'
    """
    match = _YOUTUBE_ID_RE.match(url.strip())
    if match and match.group(1):
        return match.group(1)
    return url
