"""Source loader — orchestrates one target from attribute to assigned URL.

Flow for each target:

1. Read the configured attribute; skip the target when it is empty.
2. Normalise the value to a video id and build the request URL
   (``api.endpoint`` filter).
3. Fire ``api.before``, fetch through the injected transport, filter the
   payload (``api.response``) and decode it.
4. On an upstream failure fire ``api.failure`` and return the error in
   the :class:`LoadResult`; there is no retry.
5. Otherwise filter the raw candidates (``api.results``), rank and filter
   them, narrow to the target's media kind, fire ``api.success``, pick the
   head (``video.stream``) and assign its URL (``video.source``).
6. ``api.after`` fires whatever happened.

Hook exceptions are never caught here.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

import structlog

from yt_html5.config import LoaderOptions
from yt_html5.core.hooks import Hooks
from yt_html5.core.models import MediaKind, StreamRecord
from yt_html5.core.protocols import PlaybackTarget, PlayabilityOracle, TargetDiscovery, Transport
from yt_html5.core.response_parser import decode_payload
from yt_html5.core.stream_selector import StreamSelector
from yt_html5.core.url_parser import url_to_id
from yt_html5.exceptions import UpstreamDecodeError

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of :meth:`SourceLoader.load_single` for one target."""

    target: PlaybackTarget
    video_id: str
    request_url: str
    candidates: tuple[StreamRecord, ...] = ()
    """Ranked, filtered records; empty when nothing qualified."""

    selected: StreamRecord | None = None
    source: str | None = None
    """URL assigned to the target, after the ``video.source`` filter."""

    error: UpstreamDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def narrow_to_media_kind(
    records: Sequence[StreamRecord],
    media_kind: str | None,
) -> list[StreamRecord]:
    """Keep records whose media kind matches the target's, if it declares one."""
    if media_kind is None:
        return list(records)
    try:
        wanted = MediaKind(media_kind)
    except ValueError:
        return list(records)
    if wanted is MediaKind.UNKNOWN:
        return list(records)
    return [record for record in records if record.media_kind is wanted]


class SourceLoader:
    """Resolve and assign playable sources for playback targets.

    Parameters
    ----------
    transport:
        Fetches the request URL and returns the upstream payload.
    options:
        Loader configuration; defaults to :class:`LoaderOptions()`.
    oracle:
        Playability oracle handed to the stream selector.
    hooks:
        Hook facade.  Pass one built on a shared
        :class:`~yt_html5.core.hooks.SharedRegistry` to share hooks
        between loaders.
    discovery:
        Supplies targets when :meth:`load` is called without any.
    """

    def __init__(
        self,
        transport: Transport,
        options: LoaderOptions | None = None,
        *,
        oracle: PlayabilityOracle | None = None,
        hooks: Hooks | None = None,
        discovery: TargetDiscovery | None = None,
    ) -> None:
        self.options: LoaderOptions = options if options is not None else LoaderOptions()
        self.hooks: Hooks = hooks if hooks is not None else Hooks()
        self._transport = transport
        self._discovery = discovery
        self._selector = StreamSelector(oracle, self.hooks)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_targets(self, targets: Iterable[PlaybackTarget] | None = None) -> list[PlaybackTarget]:
        """Return the targets to process, after the ``elements`` filter."""
        if targets is None:
            targets = self._discovery.discover() if self._discovery is not None else ()
        return list(self.hooks.apply_filters("elements", list(targets)))

    def load(self, targets: Iterable[PlaybackTarget] | None = None) -> list[LoadResult]:
        """Process every target in turn; skipped targets yield no result."""
        results: list[LoadResult] = []
        for target in self.get_targets(targets):
            result = self.load_single(target)
            if result is not None:
                results.append(result)
        return results

    def load_single(
        self,
        target: PlaybackTarget,
        attribute: str | None = None,
    ) -> LoadResult | None:
        """Resolve one target.  Returns ``None`` when the attribute is empty."""
        name = attribute or self.options.attribute
        value = target.get_attribute(name)
        if not value:
            log.debug("loader.skipped", attribute=name)
            return None

        video_id = url_to_id(value)
        request_url = self.hooks.apply_filters(
            "api.endpoint", self.options.request_url(video_id), video_id,
        )
        result = LoadResult(target=target, video_id=video_id, request_url=request_url)

        self.hooks.do_action("api.before", target)
        try:
            result = self._resolve(target, result)
        finally:
            self.hooks.do_action("api.after", target, result)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, target: PlaybackTarget, result: LoadResult) -> LoadResult:
        try:
            payload = self._transport.fetch(result.request_url)
            payload = self.hooks.apply_filters("api.response", payload, target)
            raw_candidates = decode_payload(payload)
        except UpstreamDecodeError as exc:
            log.info("loader.upstream_failed", video_id=result.video_id, error=str(exc))
            self.hooks.do_action("api.failure", target, exc)
            return replace(result, error=exc)

        raw_candidates = self.hooks.apply_filters("api.results", raw_candidates, payload)
        ranked = self._selector.select(raw_candidates, self.options.selection)
        ranked = narrow_to_media_kind(ranked, getattr(target, "media_kind", None))
        self.hooks.do_action("api.success", target, ranked)

        selected = self.hooks.apply_filters(
            "video.stream", ranked[0] if ranked else None, target, ranked,
        )
        source: str | None = None
        if selected is not None:
            source = self.hooks.apply_filters("video.source", selected.url, selected, target, ranked)
            if source:
                target.set_source(source)

        log.debug(
            "loader.resolved",
            video_id=result.video_id,
            candidates=len(ranked),
            format=selected.format_label if selected is not None else None,
        )
        return replace(result, candidates=tuple(ranked), selected=selected, source=source)
