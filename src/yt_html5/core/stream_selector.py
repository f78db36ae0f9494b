"""Stream ranking and filtering.

Every module-level function here is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Pipeline order (enforced by :func:`select_streams`):

1. **Normalise** — raw variants → :class:`StreamRecord`; malformed
   records are dropped.
2. **Rank** — lexicographic over :func:`rank_key`, best first.
3. **Filter** — ``with_audio`` / ``with_video`` / ``formats``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

import structlog

from yt_html5.core.hooks import Hooks
from yt_html5.core.itags import AUDIO_CODEC_PREFERENCE, VIDEO_CODEC_PREFERENCE
from yt_html5.core.models import Playability, RawStream, SelectionOptions, StreamRecord
from yt_html5.core.protocols import PlayabilityOracle
from yt_html5.core.stream_records import normalize_stream
from yt_html5.exceptions import MalformedStreamRecordError

log = structlog.get_logger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")

_PLAYABILITY_RANK: dict[Playability, int] = {
    Playability.PROBABLY: 1,
    Playability.MAYBE: 0,
    Playability.UNKNOWN: -1,
    Playability.NO: -1,
}


# ---------------------------------------------------------------------------
# 1. Normalise
# ---------------------------------------------------------------------------

def normalize_streams(
    raw_candidates: Iterable[RawStream],
    oracle: PlayabilityOracle | None = None,
) -> list[StreamRecord]:
    """Normalise every candidate, silently dropping malformed ones."""
    records: list[StreamRecord] = []
    for raw in raw_candidates:
        try:
            records.append(normalize_stream(raw, oracle))
        except MalformedStreamRecordError as exc:
            log.debug("selector.excluded", reason=str(exc))
    return records


# ---------------------------------------------------------------------------
# 2. Rank
# ---------------------------------------------------------------------------

def quality_number(label: str | None) -> int:
    """Leading integer of a format label (``"1080p60"`` → 1080), else 0."""
    if not label:
        return 0
    match = _LEADING_INT_RE.match(label)
    return int(match.group(1)) if match else 0


def codec_rank(codecs: Sequence[str], preference: Sequence[str]) -> int:
    """Score *codecs* against an ordered *preference* list.

    The first preference entry matched by any codec wins; earlier entries
    score higher.  No match scores 0, below every match.
    """
    lowered = [codec.lower() for codec in codecs]
    for index, wanted in enumerate(preference):
        wanted = wanted.lower()
        if any(codec == wanted or codec.startswith(wanted) for codec in lowered):
            return len(preference) - index
    return 0


def rank_key(record: StreamRecord) -> tuple[int | str, ...]:
    """Compute an ascending sort key that puts the best record first.

    Ordering rules, each deciding only when all earlier ones tie:

    * playability: probably > maybe > unknown = no
    * HLS / DASH-manifest flags (flagged records preferred)
    * known, positive content length
    * audio and video together
    * has video
    * numeric quality of the format label
    * bitrate, then audio bitrate
    * video codec preference, then audio codec preference
    * itag ascending (missing itag first), then URL ascending

    The last two keys make the order total, so the result never depends
    on the order the candidates arrived in.
    """
    manifest_score = int(record.is_hls) + int(record.is_dash_mpd)
    has_length = int(bool(record.content_length and record.content_length > 0))
    return (
        -_PLAYABILITY_RANK[record.playability],
        -manifest_score,
        -has_length,
        -int(record.has_audio and record.has_video),
        -int(record.has_video),
        -quality_number(record.format_label),
        -record.bitrate,
        -record.audio_bitrate,
        -codec_rank(record.codecs, VIDEO_CODEC_PREFERENCE),
        -codec_rank(record.codecs, AUDIO_CODEC_PREFERENCE),
        record.itag or 0,
        record.url,
    )


def rank_streams(records: Sequence[StreamRecord]) -> list[StreamRecord]:
    """Sort best-first.  Records equal on every key are interchangeable."""
    return sorted(records, key=rank_key)


# ---------------------------------------------------------------------------
# 3. Filter
# ---------------------------------------------------------------------------

def filter_streams(
    records: Sequence[StreamRecord],
    options: SelectionOptions,
) -> list[StreamRecord]:
    """Drop records that violate *options*; order is preserved."""
    return [
        record
        for record in records
        if (not options.with_audio or record.has_audio)
        and (not options.with_video or record.has_video)
        and options.allows_format(record.format_label)
    ]


# ---------------------------------------------------------------------------
# Composite pipeline
# ---------------------------------------------------------------------------

def select_streams(
    raw_candidates: Iterable[RawStream],
    options: SelectionOptions | None = None,
    oracle: PlayabilityOracle | None = None,
) -> list[StreamRecord]:
    """Run the full normalise → rank → filter pipeline.

    Returns an empty list when nothing qualifies; the caller takes the
    head of the list as the winner.
    """
    options = options if options is not None else SelectionOptions()
    records = normalize_streams(raw_candidates, oracle)
    ranked = rank_streams(records)
    selected = filter_streams(ranked, options)
    log.debug(
        "selector.selected",
        candidates=len(records),
        kept=len(selected),
        best=selected[0].format_label if selected else None,
    )
    return selected


class StreamSelector:
    """Stateful wrapper around :func:`select_streams`.

    Holds the playability oracle and exposes the ``streams.selected``
    filter so hooks can reorder or prune the final list.

    Parameters
    ----------
    oracle:
        Answers ``canPlayType``-style questions; ``None`` marks every
        record's playability as unknown.
    hooks:
        Hook facade used for the ``streams.selected`` filter.
    """

    def __init__(
        self,
        oracle: PlayabilityOracle | None = None,
        hooks: Hooks | None = None,
    ) -> None:
        self._oracle = oracle
        self._hooks: Hooks = hooks if hooks is not None else Hooks()

    def select(
        self,
        raw_candidates: Iterable[RawStream],
        options: SelectionOptions | None = None,
    ) -> list[StreamRecord]:
        options = options if options is not None else SelectionOptions()
        selected = select_streams(raw_candidates, options, self._oracle)
        return list(self._hooks.apply_filters("streams.selected", selected, options))
