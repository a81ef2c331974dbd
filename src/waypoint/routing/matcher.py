"""Matcher — resolves a Location against the route table.

Named targets are looked up in ``name_map``; path targets scan
``path_list`` in priority order and the first structural match wins.
Redirect and alias records are resolved recursively before the final
immutable Route is built. A failed match is never an error: it yields a
Route with an empty ``matched`` chain.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any
from urllib.parse import unquote

from waypoint._internal.types import RawLocation
from waypoint.location import Location, normalize_location
from waypoint.route import QueryStringifier, Route, create_route
from waypoint.routing.pattern import CompiledPattern, fill_params
from waypoint.routing.record import RouteConfig, RouteRecord
from waypoint.routing.table import RouteTable, create_route_map
from waypoint.util.path import resolve_path

logger = logging.getLogger("waypoint.routing")


class Matcher:
    """Route table plus the lookup algorithm over it.

    Usage::

        matcher = Matcher([
            {"path": "/user/:id", "name": "user", "component": UserView},
            {"path": "*", "component": NotFound},
        ])
        route = matcher.match({"name": "user", "params": {"id": "7"}})
        assert route.path == "/user/7"

    ``match`` is a pure function of its inputs for a given table.
    ``add_routes`` extends the table in place; nothing is ever removed.
    """

    __slots__ = ("_parse_query", "_stringify_query", "table")

    def __init__(
        self,
        routes: Sequence[RouteConfig | Mapping[str, Any]] = (),
        *,
        parse_query: Callable[[str], dict[str, Any]] | None = None,
        stringify_query: QueryStringifier | None = None,
    ) -> None:
        self.table: RouteTable = create_route_map(routes)
        self._parse_query = parse_query
        self._stringify_query = stringify_query

    def add_routes(self, routes: Sequence[RouteConfig | Mapping[str, Any]]) -> None:
        """Merge more route configuration into the existing table."""
        create_route_map(routes, self.table)

    def match(
        self,
        raw: RawLocation,
        current: Route | None = None,
        redirected_from: Location | None = None,
    ) -> Route:
        """Resolve *raw* to a Route.

        *current* supplies the base for relative paths and the params
        carried over into named targets. *redirected_from* is set when
        this match is the second leg of a redirect.
        """
        location = normalize_location(raw, current, False, self._parse_query)
        name = location.name

        if name:
            record = self.table.name_map.get(name)
            if record is None:
                logger.warning("Route with name '%s' does not exist", name)
                return self._create_route(None, location)

            param_names = [key.param for key in record.regex.keys if not key.optional]
            if location.params is None:
                location.params = {}
            if current is not None:
                for key, value in current.params.items():
                    if key not in location.params and key in param_names:
                        location.params[key] = value

            location.path = fill_params(record.path, location.params, f'named route "{name}"')
            return self._create_route(record, location, redirected_from)

        if location.path:
            location.params = {}
            for path in self.table.path_list:
                record = self.table.path_map[path]
                if match_route(record.regex, location.path, location.params):
                    return self._create_route(record, location, redirected_from)

        return self._create_route(None, location)

    def _redirect(self, record: RouteRecord, location: Location) -> Route:
        original = record.redirect
        target: Any = (
            original(create_route(record, location, None, self._stringify_query))
            if callable(original)
            else original
        )

        if isinstance(target, str):
            target = {"path": target}
        elif isinstance(target, Location):
            target = {
                key: value
                for key, value in (
                    ("path", target.path),
                    ("name", target.name),
                    ("query", target.query),
                    ("hash", target.hash),
                    ("params", target.params),
                )
                if value is not None
            }

        if not isinstance(target, Mapping):
            logger.warning("invalid redirect option: %r", target)
            return self._create_route(None, location)

        name = target.get("name")
        path = target.get("path")
        query = target["query"] if "query" in target else location.query
        hash_ = target["hash"] if "hash" in target else location.hash
        params = target["params"] if "params" in target else location.params

        if name:
            if name not in self.table.name_map:
                logger.warning('redirect failed: named route "%s" not found.', name)
            return self.match(
                Location(
                    name=name,
                    query=query,
                    hash=hash_,
                    params=dict(params) if params is not None else None,
                    normalized=True,
                ),
                None,
                location,
            )

        if path:
            raw_path = resolve_record_path(path, record)
            resolved_path = fill_params(raw_path, params, f'redirect route with path "{raw_path}"')
            return self.match(
                Location(path=resolved_path, query=query, hash=hash_, normalized=True),
                None,
                location,
            )

        logger.warning("invalid redirect option: %r", target)
        return self._create_route(None, location)

    def _alias(self, record: RouteRecord, location: Location, match_as: str) -> Route:
        aliased_path = fill_params(match_as, location.params, f'aliased route with path "{match_as}"')
        aliased_match = self.match(Location(path=aliased_path, normalized=True))
        if aliased_match.matched:
            aliased_record = aliased_match.matched[-1]
            location.params = dict(aliased_match.params)
            return self._create_route(aliased_record, location)
        return self._create_route(None, location)

    def _create_route(
        self,
        record: RouteRecord | None,
        location: Location,
        redirected_from: Location | None = None,
    ) -> Route:
        if record is not None and record.redirect:
            return self._redirect(record, redirected_from or location)
        if record is not None and record.match_as:
            return self._alias(record, location, record.match_as)
        return create_route(record, location, redirected_from, self._stringify_query)


def match_route(pattern: CompiledPattern, path: str, params: dict[str, Any]) -> bool:
    """Test *path* against *pattern*, decoding captured params into *params*."""
    m = pattern.match(path)
    if m is None:
        return False

    for key, value in zip(pattern.keys, m.groups(), strict=False):
        if value is not None:
            params[key.param] = unquote(value)

    return True


def resolve_record_path(path: str, record: RouteRecord) -> str:
    """Resolve a redirect path relative to the record's parent."""
    return resolve_path(path, record.parent.path if record.parent is not None else "/", True)
