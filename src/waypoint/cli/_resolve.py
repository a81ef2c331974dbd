"""Locate the router a CLI command should inspect.

``waypoint routes`` and ``waypoint match`` both take an import string
naming a module attribute. The attribute may be a ``Router``, a plain
route configuration list (wrapped in a fresh ``Router``), or a callable
returning either.
"""

import importlib
from collections.abc import Mapping, Sequence
from typing import Any

from waypoint.router import Router

DEFAULT_ATTRIBUTE = "router"


def resolve_router(import_string: str) -> Router:
    """Return the Router named by ``"package.module[:attribute]"``.

    The attribute defaults to ``router``. Lookup failures propagate as
    ``ModuleNotFoundError`` / ``AttributeError``; anything that is not a
    router, a route list, or a callable producing one raises ``TypeError``.
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or DEFAULT_ATTRIBUTE)

    if callable(target) and not isinstance(target, Router):
        try:
            target = target()
        except Exception as exc:
            msg = f"calling {import_string!r} to build a router failed: {exc}"
            raise TypeError(msg) from exc

    router = _as_router(target)
    if router is None:
        msg = f"{import_string!r} is a {type(target).__name__}; expected a waypoint.Router or a list of routes"
        raise TypeError(msg)
    return router


def _as_router(target: Any) -> Router | None:
    if isinstance(target, Router):
        return target
    if (
        isinstance(target, Sequence)
        and not isinstance(target, str)
        and all(isinstance(route, Mapping) for route in target)
    ):
        return Router(target)
    return None
