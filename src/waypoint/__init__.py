"""Waypoint — route matching and guarded navigation transitions.

Resolves paths, named routes, and relative locations against a nested
route configuration, and moves between routes through an ordered,
interruptible queue of navigation guards.

Basic usage::

    from waypoint import Router

    router = Router([
        {"path": "/", "component": Home},
        {"path": "/user/:id", "name": "user", "component": UserView},
        {"path": "*", "component": NotFound},
    ])

    await router.start()
    route = await router.push("/user/7")
    route.params  # {"id": "7"}

Matching only::

    from waypoint import Matcher

    matcher = Matcher([{"path": "/a", "redirect": "/b"}, {"path": "/b", "name": "b"}])
    matcher.match("/a").redirected_from  # "/a"
"""

__version__ = "0.1.0-dev"
__all__ = [
    "START",
    "ConfigurationError",
    "LazyComponent",
    "Location",
    "Matcher",
    "MemoryHistory",
    "NavigationAborted",
    "NavigationCancelled",
    "NavigationDuplicated",
    "NavigationFailure",
    "NavigationRedirected",
    "Route",
    "RouteRecord",
    "Router",
    "RouterConfig",
    "ViewRegistry",
    "WaypointError",
    "is_same_route",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from waypoint.router import Router

        return Router

    if name == "RouterConfig":
        from waypoint.config import RouterConfig

        return RouterConfig

    if name == "Matcher":
        from waypoint.routing.matcher import Matcher

        return Matcher

    if name == "RouteRecord":
        from waypoint.routing.record import RouteRecord

        return RouteRecord

    if name == "Location":
        from waypoint.location import Location

        return Location

    if name in ("Route", "START", "is_same_route"):
        from waypoint import route as _route

        return getattr(_route, name)

    if name == "MemoryHistory":
        from waypoint.history.memory import MemoryHistory

        return MemoryHistory

    if name == "LazyComponent":
        from waypoint.navigation.components import LazyComponent

        return LazyComponent

    if name == "ViewRegistry":
        from waypoint.views import ViewRegistry

        return ViewRegistry

    if name in (
        "ConfigurationError",
        "NavigationAborted",
        "NavigationCancelled",
        "NavigationDuplicated",
        "NavigationFailure",
        "NavigationRedirected",
        "WaypointError",
    ):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
