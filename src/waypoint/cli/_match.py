"""``waypoint match`` — resolve one location and print the resulting route."""

import argparse
import sys

from waypoint.cli._resolve import resolve_router
from waypoint.route import Route


def format_route(route: Route) -> list[str]:
    """Human-readable lines describing *route*."""
    if not route.matched:
        return [f"No route matches {route.full_path!r}"]

    lines = [
        f"path:      {route.path}",
        f"full path: {route.full_path}",
        f"name:      {route.name or '-'}",
    ]
    if route.params:
        lines.append("params:    " + ", ".join(f"{k}={v}" for k, v in route.params.items()))
    if route.query:
        lines.append("query:     " + ", ".join(f"{k}={v}" for k, v in route.query.items()))
    if route.redirected_from:
        lines.append(f"redirected from: {route.redirected_from}")
    lines.append("matched:   " + " > ".join(record.path or "/" for record in route.matched))
    return lines


def run_match(args: argparse.Namespace) -> None:
    """Resolve ``args.location`` against ``args.router`` and print it.

    Exits with code 1 when nothing matches.
    """
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.name:
        params = {}
        for pair in args.param:
            key, sep, value = pair.partition("=")
            if not sep:
                print(f"Error: --param expects KEY=VALUE, got {pair!r}", file=sys.stderr)
                raise SystemExit(2)
            params[key] = value
        route = router.match({"name": args.location, "params": params})
    else:
        route = router.match(args.location)

    for line in format_route(route):
        print(line)

    if not route.matched:
        raise SystemExit(1)
