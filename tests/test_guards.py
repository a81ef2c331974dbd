"""Tests for guard outcomes, guard extraction, and lazy components."""

import types
from typing import Any

import pytest

from waypoint.location import Location
from waypoint.navigation.components import LazyComponent, iter_components, resolve_async_components
from waypoint.navigation.guards import (
    BEFORE_ROUTE_ENTER,
    BEFORE_ROUTE_LEAVE,
    BEFORE_ROUTE_UPDATE,
    AttributeRegistry,
    GuardExtractor,
)
from waypoint.navigation.outcome import Abort, Continuation, Proceed, Redirect, classify
from waypoint.route import START
from waypoint.routing.table import create_route_map
from waypoint.views import ViewRegistry


def _noop(to: Any, from_: Any, next: Any) -> None:
    next()


def load_reports() -> None:
    return None


class TestClassify:
    def test_proceed(self) -> None:
        assert classify() == Proceed()
        assert classify(None) == Proceed()
        assert classify(True) == Proceed(value=True)

    def test_abort(self) -> None:
        assert classify(False) == Abort(reason=False)
        err = RuntimeError("boom")
        assert classify(err) == Abort(reason=err)

    def test_redirect(self) -> None:
        assert classify("/login") == Redirect(location="/login")
        assert classify({"name": "login"}) == Redirect(location={"name": "login"})

    def test_callable_proceeds(self) -> None:
        def cb(vm: Any) -> None:
            pass

        assert classify(cb) == Proceed(value=cb)

    def test_redirect_replace(self) -> None:
        assert Redirect(location={"path": "/a", "replace": True}).replace is True
        assert Redirect(location=Location(path="/a", replace=True)).replace is True
        assert Redirect(location="/a").replace is False


class TestContinuation:
    def test_first_call_wins(self) -> None:
        next = Continuation()
        assert not next.called
        next(False)
        next()
        assert next.called
        assert next.outcome == Abort(reason=False)

    @pytest.mark.anyio
    async def test_wait_returns_outcome(self) -> None:
        next = Continuation()
        next("/login")
        assert await next.wait() == Redirect(location="/login")


class GuardedView:
    @staticmethod
    def before_route_enter(to: Any, from_: Any, next: Any) -> None:
        next()

    def before_route_update(self, to: Any, from_: Any, next: Any) -> None:
        next()

    def before_route_leave(self, to: Any, from_: Any, next: Any) -> None:
        next()


class TestAttributeRegistry:
    def test_static_enter_guard_from_class(self) -> None:
        (guard,) = AttributeRegistry().guards(GuardedView, BEFORE_ROUTE_ENTER)
        assert guard is GuardedView.before_route_enter

    def test_methods_bound_to_instance(self) -> None:
        view = GuardedView()
        (guard,) = AttributeRegistry().guards(GuardedView, BEFORE_ROUTE_LEAVE, view)
        assert guard.__self__ is view  # type: ignore[attr-defined]

    def test_list_of_guards(self) -> None:
        component = types.SimpleNamespace(before_route_enter=[_noop, None, _noop])
        assert AttributeRegistry().guards(component, BEFORE_ROUTE_ENTER) == [_noop, _noop]

    def test_missing_hook(self) -> None:
        assert AttributeRegistry().guards(object(), BEFORE_ROUTE_UPDATE) == []

    def test_unresolved_lazy_component(self) -> None:
        lazy = LazyComponent(lambda: GuardedView)
        assert AttributeRegistry().guards(lazy, BEFORE_ROUTE_ENTER) == []

    @pytest.mark.anyio
    async def test_resolved_lazy_component(self) -> None:
        lazy = LazyComponent(lambda: GuardedView)
        await lazy.load()
        assert AttributeRegistry().guards(lazy, BEFORE_ROUTE_ENTER) == [GuardedView.before_route_enter]


def _nested_records() -> tuple[Any, Any]:
    def parent_leave(to: Any, from_: Any, next: Any) -> None:
        next()

    def child_leave(to: Any, from_: Any, next: Any) -> None:
        next()

    parent_view = types.SimpleNamespace(before_route_leave=parent_leave, before_route_update=parent_leave)
    child_view = types.SimpleNamespace(before_route_leave=child_leave, before_route_update=child_leave)
    table = create_route_map([
        {"path": "/p", "component": parent_view, "children": [{"path": "c", "component": child_view}]},
    ])
    return table.path_map["/p"], table.path_map["/p/c"]


class TestGuardExtractor:
    def test_leave_guards_innermost_first(self) -> None:
        parent, child = _nested_records()
        views = ViewRegistry()
        views.register(parent, "default", object())
        views.register(child, "default", object())
        guards = GuardExtractor(AttributeRegistry(), views).leave_guards([parent, child])
        assert [g.__name__ for g in guards] == ["child_leave", "parent_leave"]

    def test_update_guards_parent_first(self) -> None:
        parent, child = _nested_records()
        views = ViewRegistry()
        views.register(parent, "default", object())
        views.register(child, "default", object())
        guards = GuardExtractor(AttributeRegistry(), views).update_guards([parent, child])
        assert [g.__name__ for g in guards] == ["parent_leave", "child_leave"]

    def test_instance_guards_require_live_instance(self) -> None:
        parent, child = _nested_records()
        extractor = GuardExtractor(AttributeRegistry(), ViewRegistry())
        assert extractor.leave_guards([parent, child]) == []
        assert extractor.update_guards([parent, child]) == []

    def test_enter_guard_callback_deferred(self) -> None:
        received: list[Any] = []
        outcomes: list[Any] = []

        def enter(to: Any, from_: Any, next: Any) -> None:
            next(received.append)

        table = create_route_map([
            {"path": "/a", "component": types.SimpleNamespace(before_route_enter=enter)},
        ])
        record = table.path_map["/a"]
        views = ViewRegistry()
        post_enter_cbs: list[Any] = []

        (guard,) = GuardExtractor(AttributeRegistry(), views).enter_guards([record], post_enter_cbs, lambda: True)
        guard(START, START, outcomes.append)

        assert outcomes == [received.append]
        assert len(post_enter_cbs) == 1

        post_enter_cbs[0]()
        assert views.pending(record, "default") == 1

        instance = object()
        views.register(record, "default", instance)
        assert received == [instance]


class TestViewRegistry:
    def _record(self) -> Any:
        return create_route_map([{"path": "/a"}]).path_map["/a"]

    def test_register_and_get(self) -> None:
        record = self._record()
        views = ViewRegistry()
        instance = object()
        views.register(record, "default", instance)
        assert views.get(record, "default") is instance
        assert views.get(record, "side") is None

    def test_unregister_only_matching_instance(self) -> None:
        record = self._record()
        views = ViewRegistry()
        old, new = object(), object()
        views.register(record, "default", new)
        views.unregister(record, "default", old)
        assert views.get(record, "default") is new
        views.unregister(record, "default", new)
        assert views.get(record, "default") is None

    def test_teardown_hides_instance(self) -> None:
        record = self._record()
        views = ViewRegistry()
        views.register(record, "default", object())
        views.begin_teardown(record, "default")
        assert views.get(record, "default") is None

    def test_when_ready_immediate(self) -> None:
        record = self._record()
        views = ViewRegistry()
        instance = object()
        views.register(record, "default", instance)
        received: list[Any] = []
        views.when_ready(record, "default", received.append, lambda: True)
        assert received == [instance]

    def test_stale_waiter_dropped(self) -> None:
        record = self._record()
        views = ViewRegistry()
        valid = [True]
        received: list[Any] = []
        views.when_ready(record, "default", received.append, lambda: valid[0])
        valid[0] = False
        views.register(record, "default", object())
        assert received == []
        assert views.pending(record, "default") == 0

    def test_invalid_waiter_never_queued(self) -> None:
        record = self._record()
        views = ViewRegistry()
        views.when_ready(record, "default", print, lambda: False)
        assert views.pending(record, "default") == 0


class TestLazyComponent:
    @pytest.mark.anyio
    async def test_sync_loader(self) -> None:
        lazy = LazyComponent(lambda: GuardedView)
        assert not lazy.is_resolved
        assert lazy.resolved is None
        assert await lazy.load() is GuardedView
        assert lazy.is_resolved
        assert lazy.resolved is GuardedView

    @pytest.mark.anyio
    async def test_async_loader_runs_once(self) -> None:
        calls: list[int] = []

        async def loader() -> type:
            calls.append(1)
            return GuardedView

        lazy = LazyComponent(loader)
        await lazy.load()
        await lazy.load()
        assert calls == [1]

    @pytest.mark.anyio
    async def test_module_default(self) -> None:
        module = types.ModuleType("_fake_view_module")
        module.default = GuardedView  # type: ignore[attr-defined]
        lazy = LazyComponent(lambda: module)
        assert await lazy.load() is GuardedView

    def test_repr(self) -> None:
        assert repr(LazyComponent(load_reports)) == "LazyComponent(load_reports, pending)"


class TestResolveAsyncComponents:
    @pytest.mark.anyio
    async def test_loads_pending_components(self) -> None:
        first = LazyComponent(lambda: "first")
        second = LazyComponent(lambda: "second")
        table = create_route_map([{"path": "/a", "components": {"default": first, "side": second}}])
        guard = resolve_async_components([table.path_map["/a"]])

        next = Continuation()
        await guard(START, START, next)
        assert await next.wait() == Proceed()
        assert first.resolved == "first"
        assert second.resolved == "second"

    @pytest.mark.anyio
    async def test_loader_failure_aborts(self) -> None:
        err = ImportError("chunk missing")

        def broken() -> None:
            raise err

        table = create_route_map([{"path": "/a", "component": LazyComponent(broken)}])
        guard = resolve_async_components([table.path_map["/a"]])

        next = Continuation()
        await guard(START, START, next)
        assert await next.wait() == Abort(reason=err)

    def test_iter_components_skips_empty_slots(self) -> None:
        table = create_route_map([{"path": "/a"}])
        assert list(iter_components([table.path_map["/a"]])) == []
