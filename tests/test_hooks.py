"""Tests for the hook registry and dispatchers (core/hooks.py).

Coverage:
* Registration (kinds, scopes, duplicates, invalid kind)
* Lookup ordering — priority, stability, shared-before-instance
* Action dispatch — argument passing, ignored returns, error propagation
* Filter pipeline — identity law, composition, extra arguments
* Shared store isolation and thread-safe registration
"""

from __future__ import annotations

import threading

import pytest
from structlog.testing import capture_logs

from yt_html5.core.hooks import (
    ActionDispatcher,
    FilterPipeline,
    HookRegistry,
    Hooks,
    SharedRegistry,
    default_shared_registry,
)
from yt_html5.core.models import HookKind, HookScope
from yt_html5.exceptions import InvalidHookKindError


def _noop(*_args: object) -> None:
    return None


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

class TestRegister:
    def test_returns_entry(self, registry: HookRegistry) -> None:
        entry = registry.register("actions", "api.before", _noop, 5)
        assert entry.name == "api.before"
        assert entry.priority == 5
        assert entry.scope is HookScope.INSTANCE

    def test_accepts_enum_kind(self, registry: HookRegistry) -> None:
        registry.register(HookKind.FILTERS, "x", _noop)
        assert len(registry.lookup("filters", "x")) == 1

    def test_default_priority_is_ten(self, registry: HookRegistry) -> None:
        entry = registry.register("filters", "x", _noop)
        assert entry.priority == 10

    def test_invalid_kind_raises(self, registry: HookRegistry) -> None:
        with pytest.raises(InvalidHookKindError, match="Unknown hook kind"):
            registry.register("events", "x", _noop)

    def test_invalid_kind_has_hint(self, registry: HookRegistry) -> None:
        with pytest.raises(InvalidHookKindError) as exc_info:
            registry.register("events", "x", _noop)
        assert exc_info.value.hint is not None

    def test_duplicates_preserved(self, registry: HookRegistry) -> None:
        registry.register("actions", "x", _noop, 10)
        registry.register("actions", "x", _noop, 10)
        assert len(registry.lookup("actions", "x")) == 2

    def test_shared_scope_goes_to_shared_store(
        self, shared: SharedRegistry, registry: HookRegistry,
    ) -> None:
        registry.register("actions", "x", _noop, scope=HookScope.SHARED)
        assert len(shared) == 1

    def test_instance_scope_stays_local(
        self, shared: SharedRegistry, registry: HookRegistry,
    ) -> None:
        registry.register("actions", "x", _noop)
        assert len(shared) == 0

    def test_registration_is_logged(self, registry: HookRegistry) -> None:
        with capture_logs() as logs:
            registry.register("filters", "video.source", _noop, 3)
        assert logs == [
            {
                "event": "hooks.registered",
                "log_level": "debug",
                "kind": "filters",
                "name": "video.source",
                "priority": 3,
                "scope": "instance",
            }
        ]


# ---------------------------------------------------------------------------
# Lookup ordering
# ---------------------------------------------------------------------------

class TestLookup:
    def test_unknown_kind_returns_empty(self, registry: HookRegistry) -> None:
        assert registry.lookup("events", "x") == ()

    def test_no_match_returns_empty(self, registry: HookRegistry) -> None:
        registry.register("actions", "x", _noop)
        assert registry.lookup("actions", "y") == ()

    def test_kinds_are_separate(self, registry: HookRegistry) -> None:
        registry.register("actions", "x", _noop)
        assert registry.lookup("filters", "x") == ()

    def test_priority_ascending_regardless_of_registration_order(
        self, registry: HookRegistry,
    ) -> None:
        registry.register("actions", "x", _noop, 30)
        registry.register("actions", "x", _noop, 5)
        registry.register("actions", "x", _noop, 20)
        assert [e.priority for e in registry.lookup("actions", "x")] == [5, 20, 30]

    def test_equal_priority_keeps_insertion_order(self, registry: HookRegistry) -> None:
        first = lambda *_: "first"  # noqa: E731
        second = lambda *_: "second"  # noqa: E731
        registry.register("actions", "x", first)
        registry.register("actions", "x", second)
        callbacks = [e.callback for e in registry.lookup("actions", "x")]
        assert callbacks == [first, second]

    def test_shared_precedes_instance_at_equal_priority(
        self, registry: HookRegistry,
    ) -> None:
        registry.register("actions", "x", _noop, 10, HookScope.INSTANCE)
        registry.register("actions", "x", _noop, 10, HookScope.SHARED)
        scopes = [e.scope for e in registry.lookup("actions", "x")]
        assert scopes == [HookScope.SHARED, HookScope.INSTANCE]

    def test_shared_precedes_instance_even_with_higher_priority(
        self, registry: HookRegistry,
    ) -> None:
        registry.register("actions", "x", _noop, 1, HookScope.INSTANCE)
        registry.register("actions", "x", _noop, 99, HookScope.SHARED)
        entries = registry.lookup("actions", "x")
        assert [(e.scope, e.priority) for e in entries] == [
            (HookScope.SHARED, 99),
            (HookScope.INSTANCE, 1),
        ]

    def test_shared_hooks_visible_to_every_registry(self, shared: SharedRegistry) -> None:
        a = HookRegistry(shared)
        b = HookRegistry(shared)
        a.register("filters", "x", _noop, scope=HookScope.SHARED)
        assert len(b.lookup("filters", "x")) == 1

    def test_instance_hooks_invisible_to_other_registries(self, shared: SharedRegistry) -> None:
        a = HookRegistry(shared)
        b = HookRegistry(shared)
        a.register("filters", "x", _noop)
        assert b.lookup("filters", "x") == ()

    def test_separate_shared_stores_are_isolated(self) -> None:
        a = HookRegistry(SharedRegistry())
        b = HookRegistry(SharedRegistry())
        a.register("filters", "x", _noop, scope=HookScope.SHARED)
        assert b.lookup("filters", "x") == ()


class TestDefaultSharedRegistry:
    def test_is_singleton(self) -> None:
        assert default_shared_registry() is default_shared_registry()

    def test_used_when_no_store_given(self) -> None:
        assert HookRegistry().shared is default_shared_registry()


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class TestActionDispatcher:
    def test_runs_in_priority_order(self, registry: HookRegistry) -> None:
        calls: list[str] = []
        registry.register("actions", "x", lambda: calls.append("late"), 20)
        registry.register("actions", "x", lambda: calls.append("early"), 10)
        ActionDispatcher(registry).dispatch("x")
        assert calls == ["early", "late"]

    def test_passes_arguments(self, registry: HookRegistry) -> None:
        seen: list[tuple[object, ...]] = []
        registry.register("actions", "x", lambda *args: seen.append(args))
        ActionDispatcher(registry).dispatch("x", 1, "two")
        assert seen == [(1, "two")]

    def test_return_values_ignored(self, registry: HookRegistry) -> None:
        registry.register("actions", "x", lambda: "ignored")
        assert ActionDispatcher(registry).dispatch("x") is None

    def test_no_hooks_is_noop(self, registry: HookRegistry) -> None:
        ActionDispatcher(registry).dispatch("nothing")

    def test_failure_propagates_and_aborts_remaining(self, registry: HookRegistry) -> None:
        calls: list[str] = []

        def boom() -> None:
            raise RuntimeError("hook failed")

        registry.register("actions", "x", lambda: calls.append("before"), 1)
        registry.register("actions", "x", boom, 2)
        registry.register("actions", "x", lambda: calls.append("after"), 3)

        with pytest.raises(RuntimeError, match="hook failed"):
            ActionDispatcher(registry).dispatch("x")
        assert calls == ["before"]

    def test_hook_registered_during_dispatch_waits_for_next(
        self, registry: HookRegistry,
    ) -> None:
        calls: list[str] = []

        def register_more() -> None:
            calls.append("outer")
            registry.register("actions", "x", lambda: calls.append("inner"), 99)

        registry.register("actions", "x", register_more)
        dispatcher = ActionDispatcher(registry)
        dispatcher.dispatch("x")
        assert calls == ["outer"]


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

class TestFilterPipeline:
    def test_identity_without_hooks(self, registry: HookRegistry) -> None:
        value = object()
        assert FilterPipeline(registry).apply("x", value) is value

    def test_composition_order(self, registry: HookRegistry) -> None:
        f = lambda v: v + "f"  # noqa: E731
        g = lambda v: v + "g"  # noqa: E731
        registry.register("filters", "n", f, 10)
        registry.register("filters", "n", g, 20)
        assert FilterPipeline(registry).apply("n", "v") == g(f("v"))

    def test_composition_independent_of_registration_order(
        self, registry: HookRegistry,
    ) -> None:
        registry.register("filters", "n", lambda v: v * 2, 20)
        registry.register("filters", "n", lambda v: v + 1, 10)
        assert FilterPipeline(registry).apply("n", 3) == 8

    def test_extra_args_passed_to_every_hook(self, registry: HookRegistry) -> None:
        registry.register("filters", "n", lambda v, extra: v + extra)
        registry.register("filters", "n", lambda v, extra: v * extra)
        assert FilterPipeline(registry).apply("n", 1, 3) == 12

    def test_shared_filter_runs_before_instance_filter(
        self, registry: HookRegistry,
    ) -> None:
        registry.register("filters", "n", lambda v: v + ["instance"])
        registry.register("filters", "n", lambda v: v + ["shared"], scope=HookScope.SHARED)
        assert FilterPipeline(registry).apply("n", []) == ["shared", "instance"]

    def test_failure_propagates(self, registry: HookRegistry) -> None:
        def boom(_v: object) -> object:
            raise ValueError("bad filter")

        registry.register("filters", "n", boom)
        with pytest.raises(ValueError, match="bad filter"):
            FilterPipeline(registry).apply("n", 1)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

class TestHooksFacade:
    def test_add_action_and_do_action(self, hooks: Hooks) -> None:
        seen: list[str] = []
        hooks.add_action("api.before", seen.append)
        hooks.do_action("api.before", "target")
        assert seen == ["target"]

    def test_add_filter_and_apply(self, hooks: Hooks) -> None:
        hooks.add_filter("video.source", lambda url: url + "#t=10")
        assert hooks.apply_filters("video.source", "https://x") == "https://x#t=10"

    def test_shared_flag(self, shared: SharedRegistry, hooks: Hooks) -> None:
        hooks.add_filter("x", _noop, shared=True)
        other = Hooks(HookRegistry(shared))
        assert len(other.registry.lookup("filters", "x")) == 1

    def test_register_passthrough(self, hooks: Hooks) -> None:
        hooks.register("actions", "x", _noop, 3, HookScope.SHARED)
        (entry,) = hooks.registry.lookup("actions", "x")
        assert entry.priority == 3
        assert entry.scope is HookScope.SHARED


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

class TestSharedRegistryThreads:
    def test_concurrent_registration_keeps_every_entry(self, shared: SharedRegistry) -> None:
        registries = [HookRegistry(shared) for _ in range(8)]

        def worker(reg: HookRegistry) -> None:
            for i in range(50):
                reg.register("actions", "x", _noop, i, HookScope.SHARED)

        threads = [threading.Thread(target=worker, args=(reg,)) for reg in registries]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        entries = registries[0].lookup("actions", "x")
        assert len(entries) == 400
        priorities = [e.priority for e in entries]
        assert priorities == sorted(priorities)

    def test_snapshot_is_immutable(self, shared: SharedRegistry) -> None:
        before = shared.snapshot(HookKind.ACTIONS)
        HookRegistry(shared).register("actions", "x", _noop, scope=HookScope.SHARED)
        assert before == ()
        assert len(shared.snapshot(HookKind.ACTIONS)) == 1
