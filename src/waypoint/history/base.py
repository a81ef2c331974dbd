"""Transition controller.

``History`` owns the active route and runs every navigation through the
same state machine::

    match -> duplicate check -> diff matched chains
          -> queue 1: leave guards, before hooks, update guards,
                      before_enter of activated records, lazy components
          -> queue 2: component enter guards, resolve hooks
          -> commit (swap route, listener, after hooks, on_complete)
          -> deferred enter callbacks

Guards run strictly one after another. Before each guard the controller
checks that this navigation is still the pending one; a newer
``transition_to`` replaces ``pending`` and the older navigation cancels
itself at its next check.

Subclasses are navigation backends: they implement ``push``,
``replace``, ``go``, ``ensure_url`` and ``get_current_location``, and
optionally attach to an external change source in ``setup_listeners``.
"""

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

from waypoint._internal.invoke import invoke
from waypoint._internal.types import Guard, RawLocation
from waypoint.config import normalize_base
from waypoint.errors import (
    NavigationAborted,
    NavigationCancelled,
    NavigationDuplicated,
    NavigationFailure,
    NavigationRedirected,
)
from waypoint.navigation.components import resolve_async_components
from waypoint.navigation.outcome import Abort, Continuation, GuardOutcome, Proceed, Redirect
from waypoint.route import START, Route, is_same_route
from waypoint.routing.record import RouteRecord

if TYPE_CHECKING:
    from waypoint.router import Router

logger = logging.getLogger("waypoint.navigation")

type OnComplete = Callable[[Route], Any]
type OnAbort = Callable[[BaseException], Any]


class QueueDiff(NamedTuple):
    """How two matched chains relate: reused, entering, and leaving records."""

    updated: tuple[RouteRecord, ...]
    activated: tuple[RouteRecord, ...]
    deactivated: tuple[RouteRecord, ...]


def resolve_queue(current: Sequence[RouteRecord], target: Sequence[RouteRecord]) -> QueueDiff:
    """Split two chains at the first record that differs."""
    i = 0
    limit = min(len(current), len(target))
    while i < limit and current[i] is target[i]:
        i += 1
    return QueueDiff(
        updated=tuple(target[:i]),
        activated=tuple(target[i:]),
        deactivated=tuple(current[i:]),
    )


class History:
    """Base navigation backend and transition state machine.

    Attributes:
        router: The owning router (matcher, hook lists, guard extractor).
        base: Normalized base path for hrefs.
        current: The committed route; ``START`` until the first commit.
        pending: The route of the navigation in flight, if any.
        ready: Whether a navigation has ever completed (or failed first).
    """

    def __init__(self, router: "Router", base: str | None = None) -> None:
        self.router = router
        self.base = normalize_base(base)
        self.current: Route = START
        self.pending: Route | None = None
        self.ready = False
        self.listeners: list[Callable[[], Any]] = []
        self._cb: Callable[[Route], Any] | None = None
        self._ready_cbs: list[Callable[[Route], Any]] = []
        self._ready_error_cbs: list[Callable[[BaseException], Any]] = []
        self._error_cbs: list[Callable[[BaseException], Any]] = []

    # -- Backend contract --------------------------------------------------

    async def push(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        raise NotImplementedError

    async def replace(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        raise NotImplementedError

    async def go(self, n: int) -> None:
        raise NotImplementedError

    def ensure_url(self, push: bool = False) -> None:
        raise NotImplementedError

    def get_current_location(self) -> str:
        raise NotImplementedError

    def setup_listeners(self) -> None:
        """Attach to an external change source. Backends without one skip this."""

    def teardown_listeners(self) -> None:
        """Run and drop every teardown registered in ``listeners``."""
        for teardown in self.listeners:
            teardown()
        self.listeners = []

    async def start(self) -> None:
        """Navigate to the backend's current location, then attach listeners."""

        def setup(_: Any) -> None:
            self.setup_listeners()

        await self.transition_to(self.get_current_location(), setup, setup)

    # -- Subscriptions -------------------------------------------------------

    def listen(self, cb: Callable[[Route], Any]) -> None:
        """Set the callback notified with every committed route."""
        self._cb = cb

    def on_ready(
        self,
        cb: Callable[[Route], Any],
        error_cb: Callable[[BaseException], Any] | None = None,
    ) -> None:
        """Run *cb* once the first navigation commits (now, if it already has).

        *error_cb* runs instead if the first navigation to settle fails.
        """
        if self.ready:
            cb(self.current)
            return
        self._ready_cbs.append(cb)
        if error_cb is not None:
            self._ready_error_cbs.append(error_cb)

    def on_error(self, error_cb: Callable[[BaseException], Any]) -> None:
        """Subscribe to errors raised or passed by guards."""
        self._error_cbs.append(error_cb)

    # -- Transitions ---------------------------------------------------------

    async def transition_to(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        """Match *location* and navigate to it.

        *on_complete* receives the committed route; *on_abort* receives
        the ``NavigationFailure`` or guard error that stopped it.
        """
        route = self.router.match(location, self.current)

        def complete(committed: Route) -> None:
            self.update_route(committed)
            if on_complete is not None:
                on_complete(committed)
            self.ensure_url()

            if not self.ready:
                self.ready = True
                for cb in self._ready_cbs:
                    cb(committed)

        def abort(err: BaseException) -> None:
            if on_abort is not None:
                on_abort(err)
            if not self.ready and _fails_ready(err):
                self.ready = True
                for cb in self._ready_error_cbs:
                    cb(err)

        await self.confirm_transition(route, complete, abort)

    async def confirm_transition(
        self,
        route: Route,
        on_complete: Callable[[Route], Any],
        on_abort: Callable[[BaseException], Any] | None = None,
    ) -> None:
        """Run the guard queues for *route* and commit it if none objects."""
        current = self.current

        def abort(err: BaseException) -> None:
            if not isinstance(err, NavigationFailure):
                if self._error_cbs:
                    for cb in self._error_cbs:
                        cb(err)
                else:
                    logger.error("uncaught error during route navigation", exc_info=err)
            if on_abort is not None:
                on_abort(err)

        if is_same_route(route, current) and len(route.matched) == len(current.matched):
            self.ensure_url()
            abort(NavigationDuplicated(current, route))
            return

        updated, activated, deactivated = resolve_queue(current.matched, route.matched)
        extractor = self.router.guards

        queue: list[Guard | None] = [
            *extractor.leave_guards(deactivated),
            *self.router.before_hooks,
            *extractor.update_guards(updated),
            *(record.before_enter for record in activated),
            resolve_async_components(activated),
        ]

        self.pending = route

        if not await self._run_queue(queue, route, current, abort):
            return

        post_enter_cbs: list[Callable[[], None]] = []

        def is_valid() -> bool:
            return self.current is route

        queue = [
            *extractor.enter_guards(activated, post_enter_cbs, is_valid),
            *self.router.resolve_hooks,
        ]

        if not await self._run_queue(queue, route, current, abort):
            return

        if self.pending is not route:
            abort(NavigationCancelled(current, route))
            return

        self.pending = None
        on_complete(route)

        for cb in post_enter_cbs:
            cb()

    async def _run_queue(
        self,
        queue: Sequence[Guard | None],
        route: Route,
        current: Route,
        abort: Callable[[BaseException], Any],
    ) -> bool:
        """Run guards in order. Returns False once the navigation stopped."""
        for guard in queue:
            if guard is None:
                continue

            if self.pending is not route:
                abort(NavigationCancelled(current, route))
                return False

            outcome = await self._run_guard(guard, route, current)

            match outcome:
                case Proceed():
                    continue
                case Abort(reason=False):
                    self.ensure_url(push=True)
                    abort(NavigationAborted(current, route))
                    return False
                case Abort(reason=BaseException() as error):
                    self.ensure_url(push=True)
                    abort(error)
                    return False
                case Redirect(location=target) as redirect:
                    abort(NavigationRedirected(current, route, target))
                    if redirect.replace:
                        await self.replace(target)
                    else:
                        await self.push(target)
                    return False

        return True

    async def _run_guard(self, guard: Guard, to: Route, from_: Route) -> GuardOutcome:
        """Invoke one guard and wait until it calls its continuation.

        An exception raised by the guard (or by the coroutine it returns)
        counts as ``next(exc)``.
        """
        next = Continuation()
        try:
            await invoke(guard, to, from_, next)
        except Exception as exc:
            return Abort(reason=exc)
        return await next.wait()

    def update_route(self, route: Route) -> None:
        """Swap in *route*, notify the listener, then run after hooks."""
        prev = self.current
        self.current = route
        if self._cb is not None:
            self._cb(route)
        for hook in list(self.router.after_hooks):
            hook(route, prev)


def _fails_ready(err: BaseException) -> bool:
    """Whether *err* counts as the first navigation failing.

    Vetoes, cancellations and redirects do not: another navigation is
    expected to follow.
    """
    return not isinstance(err, NavigationAborted | NavigationCancelled | NavigationRedirected)
