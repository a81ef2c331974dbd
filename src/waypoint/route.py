"""Route — the immutable snapshot of a resolved navigation target.

Every navigation produces a new Route. Comparison helpers here back
duplicate-navigation detection and active-link checks.
"""

import copy
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from waypoint.location import Location
from waypoint.routing.record import RouteRecord
from waypoint.util.query import stringify_query

_TRAILING_SLASH_RE = re.compile(r"/?$")

type QueryStringifier = Callable[[Mapping[str, Any]], str]


@dataclass(frozen=True, slots=True)
class Route:
    """A resolved route. Immutable after creation.

    ``matched`` is the activation chain, root ancestor first. An empty
    chain means nothing matched; that is a valid route, not an error.

    Routes compare by value and hash on ``full_path``, ``name`` and
    ``matched``, so they can be used as dict keys and set members. The
    ``query``, ``params`` and ``meta`` dicts are private copies made by
    ``create_route``; treat them as read-only.
    """

    path: str
    full_path: str
    name: str | None = None
    hash: str = ""
    query: dict[str, Any] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    matched: tuple[RouteRecord, ...] = ()
    redirected_from: str | None = None

    def __hash__(self) -> int:
        # Equal routes share full_path, name and matched chain
        return hash((self.full_path, self.name, self.matched))


def create_route(
    record: RouteRecord | None,
    location: Location,
    redirected_from: Location | None = None,
    stringify: QueryStringifier | None = None,
) -> Route:
    """Build the immutable Route for *record* reached through *location*."""
    query = copy.deepcopy(dict(location.query or {}))
    return Route(
        name=location.name or (record.name if record is not None else None),
        meta=dict(record.meta) if record is not None else {},
        path=location.path or "/",
        hash=location.hash or "",
        query=query,
        params=dict(location.params or {}),
        full_path=get_full_path(location, stringify),
        matched=format_match(record),
        redirected_from=(
            get_full_path(redirected_from, stringify) if redirected_from is not None else None
        ),
    )


def format_match(record: RouteRecord | None) -> tuple[RouteRecord, ...]:
    """Walk ``parent`` links up to the root: the matched chain, root first."""
    chain: list[RouteRecord] = []
    while record is not None:
        chain.append(record)
        record = record.parent
    chain.reverse()
    return tuple(chain)


def get_full_path(location: Location | Route, stringify: QueryStringifier | None = None) -> str:
    """``path + query string + hash``; an empty path counts as ``/``."""
    serialize = stringify or stringify_query
    return (location.path or "/") + serialize(location.query or {}) + (location.hash or "")


# The starting route: "no navigation yet". Compared by identity only.
START = create_route(None, Location(path="/"))


def is_same_route(a: Route, b: Route | None) -> bool:
    """Whether *a* and *b* point at the same place.

    Paths are compared without a trailing slash; query and hash (and
    params, for named routes) are compared by value. ``START`` is only
    ever the same as itself.
    """
    if b is START:
        return a is b
    if b is None:
        return False
    if a.path and b.path:
        return (
            _strip_trailing_slash(a.path) == _strip_trailing_slash(b.path)
            and a.hash == b.hash
            and is_object_equal(a.query, b.query)
        )
    if a.name and b.name:
        return (
            a.name == b.name
            and a.hash == b.hash
            and is_object_equal(a.query, b.query)
            and is_object_equal(a.params, b.params)
        )
    return False


def is_object_equal(a: Mapping[str, Any] | None, b: Mapping[str, Any] | None) -> bool:
    """Value equality for query/params dicts.

    Nested mappings compare recursively; leaves compare by ``str()`` so
    ``1`` and ``"1"`` are equal, as they are once serialized into a URL.
    """
    if a is None or b is None:
        return a is b
    if len(a) != len(b):
        return False
    for key, a_value in a.items():
        if key not in b:
            return False
        b_value = b[key]
        if isinstance(a_value, Mapping) and isinstance(b_value, Mapping):
            if not is_object_equal(a_value, b_value):
                return False
        elif isinstance(a_value, list | tuple) and isinstance(b_value, list | tuple):
            if len(a_value) != len(b_value) or any(
                str(x) != str(y) for x, y in zip(a_value, b_value, strict=True)
            ):
                return False
        elif str(a_value) != str(b_value):
            return False
    return True


def is_included_route(current: Route, target: Route) -> bool:
    """Whether *current* is at or below *target* (active-link matching).

    ``/users/7`` includes ``/users``; a target hash must match exactly;
    every target query key must be present in the current query.
    """
    current_path = _TRAILING_SLASH_RE.sub("/", current.path, count=1)
    target_path = _TRAILING_SLASH_RE.sub("/", target.path, count=1)
    return (
        current_path.startswith(target_path)
        and (not target.hash or current.hash == target.hash)
        and all(key in current.query for key in target.query)
    )


def _strip_trailing_slash(path: str) -> str:
    return path.removesuffix("/")
