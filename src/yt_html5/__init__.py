"""yt-html5 — pick a playable source for a YouTube video.

A hook-driven loader that decodes upstream stream descriptors, ranks them
and assigns the winning URL to a playback target.
"""

from yt_html5.version import __version__

__all__: list[str] = ["__version__"]
