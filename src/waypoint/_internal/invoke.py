"""Invoke helpers — call sync or async user callbacks uniformly.

Guards, after hooks, and lazy component loaders can be ``def`` or
``async def``. Any code that calls one of them must handle both cases.
This module keeps the sync/async check in exactly one place.

Usage::

    from waypoint._internal.invoke import invoke

    component = await invoke(loader)
"""

import inspect
from typing import Any


async def invoke(fn: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *fn* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returned as-is
        def load_profile():
            return ProfileView

        # async: the coroutine is awaited
        async def load_profile():
            module = await import_later("views.profile")
            return module.ProfileView
    """
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
