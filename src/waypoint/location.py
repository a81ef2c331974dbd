"""Location — normalized navigation intent, and the normalizer that builds it.

A Location is still symbolic: it names a target by path or by route name
but has not been matched against the route table yet.
"""

import dataclasses
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from waypoint._internal.types import RawLocation
from waypoint.routing.pattern import fill_params
from waypoint.util.path import resolve_path, split_path
from waypoint.util.query import resolve_query

if TYPE_CHECKING:
    from waypoint.route import Route

logger = logging.getLogger("waypoint.routing")


@dataclass(slots=True)
class Location:
    """A navigation target before matching.

    Either ``path`` or ``name`` identifies the target. ``normalized``
    marks locations produced by ``normalize_location`` so normalizing
    twice is a no-op. ``append`` and ``replace`` are navigation hints:
    resolve a relative path as a child of the current one, and replace
    the current history entry instead of pushing.
    """

    path: str | None = None
    name: str | None = None
    query: dict[str, Any] | None = None
    hash: str | None = None
    params: dict[str, Any] | None = None
    append: bool = False
    replace: bool = False
    normalized: bool = False

    @classmethod
    def from_raw(cls, raw: RawLocation) -> "Location":
        """Coerce a string, mapping, or Location into a Location.

        Strings become ``Location(path=raw)``. Mappings are read by key;
        unknown keys are ignored. A Location is returned unchanged.
        """
        if isinstance(raw, Location):
            return raw
        if isinstance(raw, str):
            return cls(path=raw)
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in raw.items() if key in known})


def is_location_like(value: Any) -> bool:
    """Whether *value* names a navigation target (a redirect, for guards)."""
    if isinstance(value, str | Location):
        return True
    if isinstance(value, Mapping):
        return isinstance(value.get("path"), str) or isinstance(value.get("name"), str)
    return False


def normalize_location(
    raw: RawLocation,
    current: "Route | None" = None,
    append: bool = False,
    parse_query: Callable[[str], dict[str, Any]] | None = None,
) -> Location:
    """Turn a raw navigation request into a canonical ``Location``.

    Three cases:

    - **named**: copied as-is (with an independent params dict); the
      matcher fills in the path.
    - **relative params** (no path, params given, current route known):
      params are merged over ``current.params`` and either the current
      route's name is kept or its record's path template is re-filled.
    - **path**: query and hash are split off the raw path, the path is
      resolved against ``current.path``, the parsed query is merged with
      any explicit ``query`` (explicit wins), and a non-empty hash always
      starts with ``#``.

    Usage::

        normalize_location("../b?x=1#top", current=route)
        normalize_location({"name": "user", "params": {"id": "7"}})
        normalize_location({"params": {"page": "2"}}, current=route)
    """
    location = Location.from_raw(raw)

    if location.normalized:
        return location

    if location.name:
        named = dataclasses.replace(location)
        if location.params is not None:
            named.params = dict(location.params)
        return named

    if not location.path and location.params is not None and current is not None:
        relative = dataclasses.replace(location, normalized=True)
        params = {**current.params, **location.params}
        if current.name:
            relative.name = current.name
            relative.params = params
        elif current.matched:
            raw_path = current.matched[-1].path
            relative.path = fill_params(raw_path, params, f"path {current.path}")
        else:
            logger.warning("relative params navigation requires a current route.")
        return relative

    if not location.path and location.params is not None:
        logger.warning("relative params navigation requires a current route.")

    parsed = split_path(location.path or "")
    base_path = current.path if current is not None and current.path else "/"
    path = (
        resolve_path(parsed.path, base_path, append or location.append)
        if parsed.path
        else base_path
    )

    query = resolve_query(parsed.query, location.query, parse_query)

    hash_ = location.hash or parsed.hash
    if hash_ and not hash_.startswith("#"):
        hash_ = f"#{hash_}"

    return Location(
        path=path,
        query=query,
        hash=hash_,
        replace=location.replace,
        normalized=True,
    )
