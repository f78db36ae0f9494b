"""Static YouTube format tables.

The itag table maps the numeric format code YouTube attaches to every
stream to a quality label.  An itag that is absent from the table is
treated as an unrecognised identity and the stream is dropped.

Reference: https://support.google.com/youtube/answer/2853702
"""

from __future__ import annotations

ITAG_LABELS: dict[int, str] = {
    # Muxed (audio + video)
    5: "240p",
    17: "144p",
    18: "360p",
    22: "720p",
    36: "240p",
    37: "1080p",
    38: "3072p",
    43: "360p",
    44: "480p",
    45: "720p",
    46: "1080p",
    # 3D
    82: "360p3d",
    83: "480p3d",
    84: "720p3d",
    85: "1080p3d",
    # HLS
    91: "144p",
    92: "240p",
    93: "360p",
    94: "480p",
    95: "720p",
    96: "1080p",
    # Adaptive video, mp4
    133: "240p",
    134: "360p",
    135: "480p",
    136: "720p",
    137: "1080p",
    138: "2160p",
    160: "144p",
    264: "1440p",
    266: "2160p",
    298: "720p60",
    299: "1080p60",
    # Adaptive video, webm
    242: "240p",
    243: "360p",
    244: "480p",
    247: "720p",
    248: "1080p",
    271: "1440p",
    278: "144p",
    302: "720p60",
    303: "1080p60",
    308: "1440p60",
    313: "2160p",
    315: "2160p60",
    # Adaptive video, av01
    394: "144p",
    395: "240p",
    396: "360p",
    397: "480p",
    398: "720p",
    399: "1080p",
    400: "1440p",
    401: "2160p",
    # Adaptive audio
    139: "48kbps",
    140: "128kbps",
    141: "256kbps",
    171: "128kbps",
    172: "256kbps",
    249: "50kbps",
    250: "70kbps",
    251: "160kbps",
}


# Earlier entries are preferred.  The spellings match what upstream
# descriptors put in their ``codecs`` parameter.
VIDEO_CODEC_PREFERENCE: tuple[str, ...] = (
    "mp4v",
    "avc1",
    "Sorenson H.283",
    "MPEG-4 Visual",
    "VP8",
    "VP9",
    "H.264",
)

AUDIO_CODEC_PREFERENCE: tuple[str, ...] = (
    "mp4a",
    "mp3",
    "vorbis",
    "aac",
    "opus",
    "flac",
)

AUDIO_CODEC_PREFIXES: tuple[str, ...] = (
    "mp4a",
    "mp3",
    "vorbis",
    "aac",
    "opus",
    "flac",
    "ac-3",
    "ec-3",
)
"""Codec prefixes that mark a ``codecs`` entry as an audio track."""


def label_for_itag(itag: int | None) -> str | None:
    """Return the table label for *itag*, or ``None`` if unknown."""
    if itag is None:
        return None
    return ITAG_LABELS.get(itag)
