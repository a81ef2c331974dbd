"""Waypoint CLI — route table inspection.

Entry point registered as ``waypoint`` in ``pyproject.toml``::

    [project.scripts]
    waypoint = "waypoint.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypoint`` command."""
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Waypoint — route matching and guarded navigation transitions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypoint routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in match priority order")
    routes_parser.add_argument(
        "router",
        help="Import string (e.g. myapp.routes:router)",
    )

    # -- waypoint match ----------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Resolve a location against the routes")
    match_parser.add_argument(
        "router",
        help="Import string (e.g. myapp.routes:router)",
    )
    match_parser.add_argument("location", help="Path to resolve (e.g. /user/7?tab=posts)")
    match_parser.add_argument(
        "--name",
        action="store_true",
        help="Treat LOCATION as a route name instead of a path",
    )
    match_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Param for a named location (repeatable)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from waypoint.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from waypoint.cli._match import run_match

        run_match(args)
