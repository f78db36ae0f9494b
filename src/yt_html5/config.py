"""Loader configuration.

Every option has an explicit default.  :meth:`LoaderOptions.from_env`
lets the ``YT_HTML5_*`` environment variables override them; CLI flags
override both.

==========================  ================================================
Variable                    Effect
==========================  ================================================
``YT_HTML5_ATTRIBUTE``      target attribute holding the YouTube URL/id
``YT_HTML5_FORMATS``        ``*`` or a comma list such as ``720p,1080p``
``YT_HTML5_WITH_AUDIO``     ``1``/``true``/``yes`` to require audio
``YT_HTML5_WITH_VIDEO``     ``1``/``true``/``yes`` to require video
``YT_HTML5_ENDPOINT``       request URL template with a ``{video_id}`` field
==========================  ================================================
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from yt_html5.core.models import ANY_FORMAT, SelectionOptions

DEFAULT_ATTRIBUTE: str = "data-yt2html5"
DEFAULT_ENDPOINT: str = "https://www.youtube.com/watch?v={video_id}"


def _opt(env: Mapping[str, str], key: str, default: str) -> str:
    return env.get(key, default)


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    val = env.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes")


def parse_formats(value: str) -> str | frozenset[str]:
    """``"*"`` stays the wildcard; ``"720p, 1080p"`` becomes a label set."""
    value = value.strip()
    if not value or value == ANY_FORMAT:
        return ANY_FORMAT
    return frozenset(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True, slots=True)
class LoaderOptions:
    """Options for one :class:`~yt_html5.core.loader.SourceLoader`."""

    attribute: str = DEFAULT_ATTRIBUTE
    """Target attribute read for the YouTube URL or id."""

    formats: str | frozenset[str] = ANY_FORMAT
    """``"*"`` for any label, or the allowed labels."""

    with_audio: bool = False
    """Only accept streams that carry audio."""

    with_video: bool = False
    """Only accept streams that carry video."""

    endpoint: str = DEFAULT_ENDPOINT
    """Request URL template; ``{video_id}`` is substituted."""

    @property
    def selection(self) -> SelectionOptions:
        return SelectionOptions(
            formats=self.formats,
            with_audio=self.with_audio,
            with_video=self.with_video,
        )

    def request_url(self, video_id: str) -> str:
        return self.endpoint.replace("{video_id}", video_id)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> LoaderOptions:
        """Build options from ``YT_HTML5_*`` variables (defaults otherwise)."""
        env = os.environ if env is None else env
        return cls(
            attribute=_opt(env, "YT_HTML5_ATTRIBUTE", DEFAULT_ATTRIBUTE),
            formats=parse_formats(_opt(env, "YT_HTML5_FORMATS", ANY_FORMAT)),
            with_audio=_bool(env, "YT_HTML5_WITH_AUDIO", False),
            with_video=_bool(env, "YT_HTML5_WITH_VIDEO", False),
            endpoint=_opt(env, "YT_HTML5_ENDPOINT", DEFAULT_ENDPOINT),
        )
