"""RouteRecord frozen dataclass and the route configuration shape."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict

from waypoint._internal.types import Guard
from waypoint.routing.pattern import CompiledPattern


class PathOptions(TypedDict, total=False):
    """Options passed through to ``compile_pattern``."""

    sensitive: bool
    strict: bool
    end: bool


class RouteConfig(TypedDict):
    """One entry of a route configuration.

    Only ``path`` is required. ``component`` is shorthand for
    ``components={"default": component}``.
    """

    path: str
    name: NotRequired[str]
    component: NotRequired[Any]
    components: NotRequired[Mapping[str, Any]]
    redirect: NotRequired[str | Mapping[str, Any] | Callable[..., Any]]
    children: NotRequired[Sequence["RouteConfig"]]
    alias: NotRequired[str | Sequence[str]]
    before_enter: NotRequired[Guard]
    meta: NotRequired[Mapping[str, Any]]
    props: NotRequired[Any]
    case_sensitive: NotRequired[bool]
    path_options: NotRequired[PathOptions]


@dataclass(frozen=True, slots=True, eq=False)
class RouteRecord:
    """A compiled entry of the route table; the unit of matching.

    Created once while the table is built and never mutated afterwards.
    Records compare and hash by identity, so two records with the same
    path (a route and its alias, for instance) stay distinct.

    ``parent`` is only walked to rebuild the matched chain; ``match_as``
    is set on alias records and holds the canonical record's path.
    """

    path: str
    regex: CompiledPattern
    components: Mapping[str, Any] = field(default_factory=dict)
    name: str | None = None
    parent: "RouteRecord | None" = None
    match_as: str | None = None
    redirect: str | Mapping[str, Any] | Callable[..., Any] | None = None
    before_enter: Guard | None = None
    meta: Mapping[str, Any] = field(default_factory=dict)
    props: Any = field(default_factory=dict)

    def __repr__(self) -> str:
        extra = f", name={self.name!r}" if self.name else ""
        if self.match_as is not None:
            extra += f", match_as={self.match_as!r}"
        return f"RouteRecord(path={self.path!r}{extra})"
