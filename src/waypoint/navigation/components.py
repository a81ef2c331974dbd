"""Lazy route components.

A route can name a component that is not loaded yet::

    {"path": "/reports", "component": LazyComponent(load_reports_view)}

Before any component-level enter guard runs, the transition loads every
lazy component of the records it activates, concurrently, and caches the
result on the wrapper. Records themselves stay untouched.
"""

import logging
from collections.abc import Callable, Iterator, Sequence
from types import ModuleType
from typing import Any

import anyio

from waypoint._internal.invoke import invoke
from waypoint._internal.types import Guard, Next
from waypoint.routing.record import RouteRecord

logger = logging.getLogger("waypoint.navigation")

_UNRESOLVED = object()


class LazyComponent:
    """A component produced on demand by *loader*.

    *loader* takes no arguments and returns the component or an awaitable
    of it. A returned module contributes its ``default`` attribute when it
    has one.
    """

    __slots__ = ("_resolved", "loader")

    def __init__(self, loader: Callable[[], Any]) -> None:
        self.loader = loader
        self._resolved: Any = _UNRESOLVED

    def __repr__(self) -> str:
        name = getattr(self.loader, "__qualname__", repr(self.loader))
        state = "resolved" if self.is_resolved else "pending"
        return f"LazyComponent({name}, {state})"

    @property
    def is_resolved(self) -> bool:
        return self._resolved is not _UNRESOLVED

    @property
    def resolved(self) -> Any:
        """The loaded component, or ``None`` before loading."""
        return None if self._resolved is _UNRESOLVED else self._resolved

    async def load(self) -> Any:
        if self._resolved is _UNRESOLVED:
            value = await invoke(self.loader)
            if isinstance(value, ModuleType):
                value = getattr(value, "default", value)
            self._resolved = value
        return self._resolved


def iter_components(records: Sequence[RouteRecord]) -> Iterator[tuple[RouteRecord, str, Any]]:
    """Yield ``(record, view_key, component)`` for every view slot, in chain order."""
    for record in records:
        for key, component in record.components.items():
            if component is not None:
                yield record, key, component


def resolve_async_components(records: Sequence[RouteRecord]) -> Guard:
    """A guard that loads every pending ``LazyComponent`` in *records*.

    Loaders run concurrently in one task group. The first loader failure
    is logged and aborts the navigation with that error.
    """

    async def resolve_components(to: Any, from_: Any, next: Next) -> None:
        pending = [
            (key, component)
            for _, key, component in iter_components(records)
            if isinstance(component, LazyComponent) and not component.is_resolved
        ]
        if not pending:
            next()
            return

        errors: list[Exception] = []

        async def _load(key: str, component: LazyComponent) -> None:
            try:
                await component.load()
            except Exception as exc:
                logger.warning("Failed to resolve async component %s: %s", key, exc)
                errors.append(exc)

        async with anyio.create_task_group() as tg:
            for key, component in pending:
                tg.start_soon(_load, key, component)

        if errors:
            next(errors[0])
        else:
            next()

    return resolve_components
