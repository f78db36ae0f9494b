"""In-memory playback targets and discovery."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field


@dataclass
class MediaTarget:
    """A plain stand-in for an HTML media element.

    ``attributes`` plays the role of the element's attributes; ``source``
    receives the chosen URL.
    """

    attributes: Mapping[str, str] = field(default_factory=dict)
    media_kind: str | None = "video"
    source: str | None = None

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_source(self, url: str) -> None:
        self.source = url


@dataclass(frozen=True)
class StaticDiscovery:
    """Discovery over a fixed sequence of targets."""

    targets: Sequence[MediaTarget] = ()

    def discover(self) -> list[MediaTarget]:
        return list(self.targets)
