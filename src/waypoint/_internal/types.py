"""Shared type aliases used across waypoint modules."""

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from waypoint.location import Location
    from waypoint.route import Route

# Anything accepted where a navigation target is expected
type RawLocation = str | Mapping[str, Any] | Location

# Continuation handed to every guard: next(), next(False), next(exc), next("/path")
type Next = Callable[..., None]

# Navigation guard: (to, from_, next) -> None | awaitable
type Guard = Callable[[Route, Route, Next], Awaitable[None] | None]

# After hook: (to, from_) -> None
type AfterHook = Callable[[Route, Route], Any]
