"""``waypoint routes`` — list the route table.

Resolves an import string to a Router and prints every record in match
priority order with its name and what it resolves to.
"""

import argparse
import sys

from waypoint.cli._resolve import resolve_router
from waypoint.routing.record import RouteRecord


def describe_target(record: RouteRecord) -> str:
    """What a record resolves to: a redirect, an alias, or its components."""
    if record.redirect is not None:
        redirect = record.redirect
        if callable(redirect):
            label = getattr(redirect, "__name__", repr(redirect))
            return f"-> {label}()"
        return f"-> {redirect!r}" if not isinstance(redirect, str) else f"-> {redirect}"
    if record.match_as is not None:
        return f"alias of {record.match_as}"
    names = [
        f"{key}={getattr(component, '__name__', repr(component))}"
        for key, component in record.components.items()
        if component is not None
    ]
    return ", ".join(names)


def run_routes(args: argparse.Namespace) -> None:
    """Print a PATH / NAME / TARGET table for ``args.router``."""
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    records = router.matcher.table.records
    if not records:
        print("No routes registered.")
        return

    rows = [(record.path or "/", record.name or "", describe_target(record)) for record in records]

    max_path = max(max(len(r[0]) for r in rows), 4)  # "PATH" header
    max_name = max(max(len(r[1]) for r in rows), 4)  # "NAME" header

    fmt = f"{{:<{max_path}}}  {{:<{max_name}}}  {{}}"
    print(fmt.format("PATH", "NAME", "TARGET"))
    sep_len = max_path + max_name + 4 + max((len(r[2]) for r in rows), default=0)
    print("-" * min(sep_len, 80))
    for path, name, target in rows:
        print(fmt.format(path, name, target))
