"""Core / service layer — hooks, stream normalisation and selection.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* Logging through ``structlog`` at debug/info level only.

:mod:`yt_html5.core.loader` is not re-exported here because it depends
on :mod:`yt_html5.config`, which itself imports the core models.
"""

from yt_html5.core.hooks import (
    ActionDispatcher,
    FilterPipeline,
    HookRegistry,
    Hooks,
    SharedRegistry,
    default_shared_registry,
)
from yt_html5.core.models import (
    ANY_FORMAT,
    HookEntry,
    HookKind,
    HookScope,
    LegacyStream,
    MediaKind,
    Playability,
    PlayerStream,
    RawStream,
    SelectionOptions,
    StreamRecord,
    YtDlpStream,
)
from yt_html5.core.protocols import PlaybackTarget, PlayabilityOracle, TargetDiscovery, Transport
from yt_html5.core.stream_selector import StreamSelector, select_streams

__all__: list[str] = [
    "ANY_FORMAT",
    "ActionDispatcher",
    "FilterPipeline",
    "HookEntry",
    "HookKind",
    "HookRegistry",
    "HookScope",
    "Hooks",
    "LegacyStream",
    "MediaKind",
    "Playability",
    "PlaybackTarget",
    "PlayabilityOracle",
    "PlayerStream",
    "RawStream",
    "SelectionOptions",
    "SharedRegistry",
    "StreamRecord",
    "StreamSelector",
    "TargetDiscovery",
    "Transport",
    "YtDlpStream",
    "default_shared_registry",
    "select_streams",
]
