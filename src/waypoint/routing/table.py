"""Route record table.

Flattens a nested route configuration into three aligned lookup
structures:

- ``path_list`` — record paths in match priority order (registration
  order, with ``*`` always last)
- ``path_map``  — path -> RouteRecord
- ``name_map``  — name -> RouteRecord

The table is built once at startup and may later be extended in place
(``create_route_map(routes, table)``). Nothing is ever removed.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from waypoint.errors import ConfigurationError
from waypoint.routing.pattern import CompiledPattern, compile_pattern
from waypoint.routing.record import RouteConfig, RouteRecord
from waypoint.util.path import clean_path

logger = logging.getLogger("waypoint.routing")

WILDCARD = "*"

_DEFAULT_CHILD_RE = re.compile(r"^/?$")


@dataclass(slots=True)
class RouteTable:
    """The three lookup structures, built and extended together."""

    path_list: list[str] = field(default_factory=list)
    path_map: dict[str, RouteRecord] = field(default_factory=dict)
    name_map: dict[str, RouteRecord] = field(default_factory=dict)

    @property
    def records(self) -> list[RouteRecord]:
        """Records in match priority order."""
        return [self.path_map[path] for path in self.path_list]


def create_route_map(
    routes: Sequence[RouteConfig | Mapping[str, Any]],
    table: RouteTable | None = None,
) -> RouteTable:
    """Build a route table from *routes*, or merge them into *table*.

    Usage::

        table = create_route_map([{"path": "/", "component": Home}])
        create_route_map([{"path": "/about", "component": About}], table)

    Raises ``ConfigurationError`` for a missing ``path`` or a string
    component. Softer problems (duplicate names, duplicate param keys,
    missing leading slashes) are logged and the table stays usable.
    """
    if table is None:
        table = RouteTable()

    for route in routes:
        _add_route_record(table, route)

    # Wildcards match last, whatever order they were registered in
    wildcards = [path for path in table.path_list if path == WILDCARD]
    if wildcards:
        table.path_list[:] = [path for path in table.path_list if path != WILDCARD] + wildcards

    missing_slash = [
        path for path in table.path_list if path and path[0] not in (WILDCARD, "/")
    ]
    if missing_slash:
        names = "\n".join(f"- {path}" for path in missing_slash)
        logger.warning(
            "Non-nested routes must include a leading slash character. "
            "Fix the following routes: \n%s",
            names,
        )

    return table


def _add_route_record(
    table: RouteTable,
    route: RouteConfig | Mapping[str, Any],
    parent: RouteRecord | None = None,
    match_as: str | None = None,
) -> None:
    path = route.get("path")
    name = route.get("name")
    if path is None:
        msg = '"path" is required in a route configuration.'
        raise ConfigurationError(msg)
    if isinstance(route.get("component"), str):
        msg = (
            f'route config "component" for path: {path or name!s} cannot be a '
            "string id. Use an actual component instead."
        )
        raise ConfigurationError(msg)

    path_options: dict[str, Any] = dict(route.get("path_options") or {})
    normalized_path = normalize_path(path, parent, bool(path_options.get("strict")))
    case_sensitive = route.get("case_sensitive")
    if isinstance(case_sensitive, bool):
        path_options["sensitive"] = case_sensitive

    components = route.get("components")
    props = route.get("props")
    if props is None:
        props_map: Any = {}
    elif components:
        # Per-view mapping; any other value is passed through as given
        props_map = dict(props) if isinstance(props, Mapping) else props
    else:
        props_map = {"default": props}

    record = RouteRecord(
        path=normalized_path,
        regex=compile_route_regex(normalized_path, path_options),
        components=dict(components) if components else {"default": route.get("component")},
        name=name,
        parent=parent,
        match_as=match_as,
        redirect=route.get("redirect"),
        before_enter=route.get("before_enter"),
        meta=dict(route.get("meta") or {}),
        props=props_map,
    )

    children = route.get("children")
    if children:
        if name and not route.get("redirect") and any(
            _DEFAULT_CHILD_RE.match(child.get("path") or "") for child in children
        ):
            logger.warning(
                "Named Route '%s' has a default child route. "
                "When navigating to this named route ({name: '%s'}), "
                "the default child route will not be rendered. Remove the name from "
                "this route and use the name of the default child route for named "
                "links instead.",
                name,
                name,
            )
        for child in children:
            child_match_as = clean_path(f"{match_as}/{child.get('path')}") if match_as else None
            _add_route_record(table, child, record, child_match_as)

    if record.path not in table.path_map:
        table.path_list.append(record.path)
        table.path_map[record.path] = record

    alias = route.get("alias")
    if alias is not None:
        aliases = [alias] if isinstance(alias, str) else list(alias)
        for alias_path in aliases:
            if alias_path == path:
                logger.warning(
                    'Found an alias with the same value as the path: "%s". '
                    "You have to remove that alias. It will be ignored.",
                    path,
                )
                continue
            alias_route: dict[str, Any] = {"path": alias_path}
            if children:
                alias_route["children"] = children
            _add_route_record(table, alias_route, parent, record.path or "/")

    if name:
        if name not in table.name_map:
            table.name_map[name] = record
        elif not match_as:
            logger.warning(
                'Duplicate named routes definition: { name: "%s", path: "%s" }',
                name,
                record.path,
            )


def compile_route_regex(path: str, path_options: Mapping[str, Any]) -> CompiledPattern:
    """Compile a record path, logging duplicate param names."""
    pattern = compile_pattern(
        path,
        sensitive=bool(path_options.get("sensitive", False)),
        strict=bool(path_options.get("strict", False)),
        end=bool(path_options.get("end", True)),
    )
    seen: set[str | int] = set()
    for key in pattern.keys:
        if key.name in seen:
            logger.warning('Duplicate param keys in route with path: "%s"', path)
        seen.add(key.name)
    return pattern


def normalize_path(path: str, parent: RouteRecord | None = None, strict: bool = False) -> str:
    """Normalize a configured path against its parent record.

    Strips one trailing slash unless *strict*, passes absolute paths
    through, and joins relative paths onto the parent's path.
    """
    if not strict:
        path = path.removesuffix("/")
    if path.startswith("/"):
        return path
    if parent is None:
        return path
    return clean_path(f"{parent.path}/{path}")
