"""Waypoint exception hierarchy.

Shared across the route table, matcher, and transition controller so
every module raises and catches the same types.

Configuration problems that make a route table unusable raise
``ConfigurationError``. Everything that can happen during a navigation
is a ``NavigationFailure``: it is handed to ``on_abort`` callbacks (or
raised from ``Router.push`` / ``Router.replace``) and never crashes the
controller.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from waypoint.route import Route


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when a route configuration is structurally invalid.

    Only fields the table cannot be built without are fatal: a missing
    ``path`` or a component given as a string id.
    """


class NavigationFailure(WaypointError):
    """A navigation that did not commit.

    Attributes:
        from_route: The route that was active when the navigation started.
        to_route: The route the navigation was heading to.
    """

    default_message = "Navigation failed"

    def __init__(self, from_route: "Route", to_route: "Route", detail: str = "") -> None:
        self.from_route = from_route
        self.to_route = to_route
        super().__init__(detail or f"{self.default_message}: {from_route.full_path!r} -> {to_route.full_path!r}")


class NavigationDuplicated(NavigationFailure):
    """The target route is the route that is already active."""

    default_message = "Avoided redundant navigation to current location"

    def __init__(self, from_route: "Route", to_route: "Route") -> None:
        super().__init__(
            from_route,
            to_route,
            f"{self.default_message}: {to_route.full_path!r}",
        )


class NavigationCancelled(NavigationFailure):
    """A newer navigation superseded this one before it committed."""

    default_message = "Navigation cancelled"


class NavigationAborted(NavigationFailure):
    """A guard vetoed the navigation with ``next(False)``."""

    default_message = "Navigation aborted by a navigation guard"


class NavigationRedirected(NavigationFailure):
    """A guard sent the navigation somewhere else.

    ``target`` is the raw location the guard passed to ``next``.
    """

    default_message = "Redirected by a navigation guard"

    def __init__(self, from_route: "Route", to_route: "Route", target: Any) -> None:
        self.target = target
        super().__init__(
            from_route,
            to_route,
            f"{self.default_message}: {from_route.full_path!r} -> {to_route.full_path!r} (now {target!r})",
        )
