"""Waypoint router.

The router owns one matcher, one history backend, one view registry and
its own hook lists. Nothing is global: several routers can coexist in a
process without seeing each other's routes or hooks.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from waypoint._internal.types import AfterHook, Guard, RawLocation
from waypoint.config import MODES, RouterConfig
from waypoint.errors import ConfigurationError
from waypoint.history.base import History, OnAbort, OnComplete
from waypoint.history.memory import MemoryHistory
from waypoint.location import Location, normalize_location
from waypoint.navigation.guards import AttributeRegistry, ComponentRegistry, GuardExtractor
from waypoint.route import START, Route
from waypoint.routing.matcher import Matcher
from waypoint.routing.record import RouteConfig
from waypoint.util.path import clean_path
from waypoint.views import ViewRegistry


@dataclass(frozen=True, slots=True)
class Resolved:
    """Result of ``Router.resolve``: the location, its route, and an href."""

    location: Location
    route: Route
    href: str


class Router:
    """The waypoint router.

    Usage::

        router = Router([
            {"path": "/", "component": Home},
            {"path": "/user/:id", "name": "user", "component": UserView},
        ])

        def require_login(to, from_, next):
            next("/login" if to.meta.get("auth") and not session.user else None)

        router.before_each(require_login)

        await router.start()
        await router.push({"name": "user", "params": {"id": "7"}})
    """

    def __init__(
        self,
        routes: Sequence[RouteConfig | Mapping[str, Any]] = (),
        config: RouterConfig | None = None,
        *,
        registry: ComponentRegistry | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        if self.config.mode not in MODES:
            msg = f"invalid mode: {self.config.mode!r} (expected one of {sorted(MODES)})"
            raise ConfigurationError(msg)

        self.before_hooks: list[Guard] = []
        self.resolve_hooks: list[Guard] = []
        self.after_hooks: list[AfterHook] = []

        self.matcher = Matcher(
            routes,
            parse_query=self.config.parse_query,
            stringify_query=self.config.stringify_query,
        )
        self.views = ViewRegistry()
        self.guards = GuardExtractor(registry or AttributeRegistry(), self.views)
        self.history: History = MemoryHistory(self, self.config.base)

    @property
    def mode(self) -> str:
        return self.config.mode

    @property
    def current_route(self) -> Route:
        return self.history.current

    def match(
        self,
        raw: RawLocation,
        current: Route | None = None,
        redirected_from: Location | None = None,
    ) -> Route:
        return self.matcher.match(raw, current, redirected_from)

    # -- Hooks ---------------------------------------------------------------

    def before_each(self, guard: Guard) -> Callable[[], None]:
        """Register a global guard run before per-route guards.

        Returns a function that unregisters it.
        """
        return _register_hook(self.before_hooks, guard)

    def before_resolve(self, guard: Guard) -> Callable[[], None]:
        """Register a global guard run after component enter guards."""
        return _register_hook(self.resolve_hooks, guard)

    def after_each(self, hook: AfterHook) -> Callable[[], None]:
        """Register a ``(to, from_)`` callback run after every commit."""
        return _register_hook(self.after_hooks, hook)

    def on_ready(
        self,
        cb: Callable[[Route], Any],
        error_cb: Callable[[BaseException], Any] | None = None,
    ) -> None:
        self.history.on_ready(cb, error_cb)

    def on_error(self, error_cb: Callable[[BaseException], Any]) -> None:
        self.history.on_error(error_cb)

    # -- Navigation ----------------------------------------------------------

    async def start(self) -> None:
        """Run the initial navigation and attach the backend's listeners."""
        await self.history.start()

    def stop(self) -> None:
        """Detach the backend's listeners. The router stays usable."""
        self.history.teardown_listeners()

    async def push(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> Route | None:
        """Navigate to *location*, adding a history entry.

        Without callbacks, returns the committed route or raises the
        failure that stopped the navigation.
        """
        if on_complete is None and on_abort is None:
            settled = _Settled()
            await self.history.push(location, settled.resolve, settled.reject)
            return settled.result()
        await self.history.push(location, on_complete, on_abort)
        return None

    async def replace(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> Route | None:
        """Navigate to *location*, replacing the current history entry."""
        if on_complete is None and on_abort is None:
            settled = _Settled()
            await self.history.replace(location, settled.resolve, settled.reject)
            return settled.result()
        await self.history.replace(location, on_complete, on_abort)
        return None

    async def go(self, n: int) -> None:
        await self.history.go(n)

    async def back(self) -> None:
        await self.go(-1)

    async def forward(self) -> None:
        await self.go(1)

    # -- Introspection -------------------------------------------------------

    def get_matched_components(self, to: RawLocation | Route | None = None) -> list[Any]:
        """Components of every record matched by *to* (default: current route)."""
        if to is None:
            route = self.current_route
        elif isinstance(to, Route):
            route = to
        else:
            route = self.resolve(to).route
        return [
            component
            for record in route.matched
            for component in record.components.values()
        ]

    def resolve(
        self,
        to: RawLocation,
        current: Route | None = None,
        append: bool = False,
    ) -> Resolved:
        """Resolve *to* without navigating: location, route, and href."""
        current = current or self.history.current
        location = normalize_location(to, current, append, self.config.parse_query)
        route = self.match(location, current)
        full_path = route.redirected_from or route.full_path
        href = create_href(self.history.base, full_path)
        return Resolved(location=location, route=route, href=href)

    async def add_routes(self, routes: Sequence[RouteConfig | Mapping[str, Any]]) -> None:
        """Add routes at runtime.

        If a navigation already happened, the current location is
        re-resolved so a route that now matches better takes effect.
        """
        self.matcher.add_routes(routes)
        if self.history.current is not START:
            await self.history.transition_to(self.history.get_current_location())


def _register_hook[T](hooks: list[T], fn: T) -> Callable[[], None]:
    hooks.append(fn)

    def unregister() -> None:
        if fn in hooks:
            hooks.remove(fn)

    return unregister


def create_href(base: str, full_path: str) -> str:
    """Join the router base onto a full path."""
    return clean_path(f"{base}/{full_path}") if base else full_path


class _Settled:
    """Collects the outcome of one navigation for ``Router.push``/``replace``."""

    __slots__ = ("error", "route")

    def __init__(self) -> None:
        self.route: Route | None = None
        self.error: BaseException | None = None

    def resolve(self, route: Route) -> None:
        self.route = route

    def reject(self, error: BaseException) -> None:
        self.error = error

    def result(self) -> Route | None:
        if self.error is not None:
            raise self.error
        return self.route


