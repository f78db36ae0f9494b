"""Named, priority-ordered action and filter hooks.

Two scopes exist:

* **shared** — entries live in a :class:`SharedRegistry`, created once
  for the process and attached to every :class:`HookRegistry` that
  should see them;
* **instance** — entries live on the :class:`HookRegistry` itself and
  die with it.

A lookup always yields the shared matches first, then the instance
matches, each group sorted ascending by priority.  ``sorted`` is stable,
so equal priorities keep registration order.

Hooks run strictly one after another.  A callback exception aborts the
rest of the dispatch and propagates to the caller unchanged.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import structlog

from yt_html5.core.models import HookEntry, HookKind, HookScope
from yt_html5.exceptions import InvalidHookKindError

log = structlog.get_logger(__name__)

DEFAULT_PRIORITY: int = 10


def _coerce_kind(kind: HookKind | str) -> HookKind | None:
    try:
        return HookKind(kind)
    except ValueError:
        return None


def _ordered(entries: tuple[HookEntry, ...], name: str) -> list[HookEntry]:
    return sorted(
        (entry for entry in entries if entry.name == name),
        key=lambda entry: entry.priority,
    )


# ---------------------------------------------------------------------------
# Shared store
# ---------------------------------------------------------------------------

class SharedRegistry:
    """Process-wide hook store shared by many :class:`HookRegistry` objects.

    Writers are serialised by a lock and publish a fresh tuple per kind
    (copy-on-write), so a reader always sees one consistent snapshot even
    while another thread registers.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[HookKind, tuple[HookEntry, ...]] = {
            kind: () for kind in HookKind
        }

    def append(self, kind: HookKind, entry: HookEntry) -> None:
        with self._lock:
            self._entries[kind] = self._entries[kind] + (entry,)

    def snapshot(self, kind: HookKind) -> tuple[HookEntry, ...]:
        return self._entries[kind]

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())


_DEFAULT_SHARED: SharedRegistry | None = None
_DEFAULT_SHARED_LOCK = threading.Lock()


def default_shared_registry() -> SharedRegistry:
    """Return the process-wide :class:`SharedRegistry`, creating it on first use."""
    global _DEFAULT_SHARED
    with _DEFAULT_SHARED_LOCK:
        if _DEFAULT_SHARED is None:
            _DEFAULT_SHARED = SharedRegistry()
        return _DEFAULT_SHARED


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class HookRegistry:
    """Hook storage for one owner, attached to a shared store.

    Parameters
    ----------
    shared:
        The shared store whose entries precede this registry's own.
        Defaults to :func:`default_shared_registry`.
    """

    def __init__(self, shared: SharedRegistry | None = None) -> None:
        self.shared: SharedRegistry = shared if shared is not None else default_shared_registry()
        self._entries: dict[HookKind, tuple[HookEntry, ...]] = {
            kind: () for kind in HookKind
        }

    def register(
        self,
        kind: HookKind | str,
        name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
        scope: HookScope = HookScope.INSTANCE,
    ) -> HookEntry:
        """Append a hook.  Existing entries are never replaced.

        Raises
        ------
        InvalidHookKindError
            If *kind* is neither ``"actions"`` nor ``"filters"``.
        """
        hook_kind = _coerce_kind(kind)
        if hook_kind is None:
            raise InvalidHookKindError(
                f"Unknown hook kind: {kind!r}",
                hint="Use 'actions' or 'filters'.",
            )

        entry = HookEntry(name=name, priority=priority, scope=HookScope(scope), callback=callback)
        if entry.scope is HookScope.SHARED:
            self.shared.append(hook_kind, entry)
        else:
            self._entries[hook_kind] = self._entries[hook_kind] + (entry,)

        log.debug(
            "hooks.registered",
            kind=hook_kind.value,
            name=name,
            priority=priority,
            scope=entry.scope.value,
        )
        return entry

    def lookup(self, kind: HookKind | str, name: str) -> tuple[HookEntry, ...]:
        """Return shared then instance matches for *name*, each priority-ordered.

        Unknown kinds yield an empty tuple.
        """
        hook_kind = _coerce_kind(kind)
        if hook_kind is None:
            return ()
        shared = _ordered(self.shared.snapshot(hook_kind), name)
        local = _ordered(self._entries[hook_kind], name)
        return tuple(shared + local)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class ActionDispatcher:
    """Run every action hook registered under a name, for side effects."""

    def __init__(self, registry: HookRegistry) -> None:
        self._registry = registry

    def dispatch(self, name: str, *args: Any) -> None:
        for entry in self._registry.lookup(HookKind.ACTIONS, name):
            entry.callback(*args)


class FilterPipeline:
    """Thread a value through every filter hook registered under a name."""

    def __init__(self, registry: HookRegistry) -> None:
        self._registry = registry

    def apply(self, name: str, value: Any, *args: Any) -> Any:
        for entry in self._registry.lookup(HookKind.FILTERS, name):
            value = entry.callback(value, *args)
        return value


class Hooks:
    """Convenience facade bundling a registry with its two dispatchers.

    Usage::

        hooks = Hooks()
        hooks.add_filter("video.source", lambda url, *_: url + "&t=30")
        hooks.apply_filters("video.source", "https://...")
    """

    def __init__(self, registry: HookRegistry | None = None) -> None:
        self.registry: HookRegistry = registry if registry is not None else HookRegistry()
        self._actions = ActionDispatcher(self.registry)
        self._filters = FilterPipeline(self.registry)

    def register(
        self,
        kind: HookKind | str,
        name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
        scope: HookScope = HookScope.INSTANCE,
    ) -> HookEntry:
        return self.registry.register(kind, name, callback, priority, scope)

    def add_action(
        self,
        name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
        *,
        shared: bool = False,
    ) -> HookEntry:
        scope = HookScope.SHARED if shared else HookScope.INSTANCE
        return self.registry.register(HookKind.ACTIONS, name, callback, priority, scope)

    def add_filter(
        self,
        name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
        *,
        shared: bool = False,
    ) -> HookEntry:
        scope = HookScope.SHARED if shared else HookScope.INSTANCE
        return self.registry.register(HookKind.FILTERS, name, callback, priority, scope)

    def do_action(self, name: str, *args: Any) -> None:
        self._actions.dispatch(name, *args)

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        return self._filters.apply(name, value, *args)
