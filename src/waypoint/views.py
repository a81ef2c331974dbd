"""View registry — live component instances per (record, view slot).

The UI layer registers an instance when it mounts the component for a
record's view slot and unregisters it on unmount. The transition
controller reads instances to bind leave/update guards, and defers the
callbacks that enter guards pass to ``next`` until the instance for
their slot is registered.

Readiness is signalled explicitly: ``when_ready`` fires immediately for a
live instance, otherwise on the next ``register`` for that slot, as long
as the waiter's ``is_valid()`` still holds. Waiters whose transition went
stale are dropped instead of retried.
"""

import logging
from collections.abc import Callable
from typing import Any

from waypoint.routing.record import RouteRecord

logger = logging.getLogger("waypoint.views")

type ViewKey = tuple[RouteRecord, str]
type Waiter = tuple[Callable[[Any], Any], Callable[[], bool]]


class ViewRegistry:
    """Instances mounted for route records, keyed by record and view name.

    Usage (UI integration side)::

        views.register(route.matched[-1], "default", widget)
        ...
        views.begin_teardown(record, "default")
        views.unregister(record, "default")
    """

    __slots__ = ("_instances", "_tearing_down", "_waiters")

    def __init__(self) -> None:
        self._instances: dict[ViewKey, Any] = {}
        self._tearing_down: set[ViewKey] = set()
        self._waiters: dict[ViewKey, list[Waiter]] = {}

    def register(self, record: RouteRecord, key: str, instance: Any) -> None:
        """Record *instance* as mounted and wake any valid waiters."""
        view_key = (record, key)
        self._instances[view_key] = instance
        self._tearing_down.discard(view_key)
        logger.debug("registered view %r for %r", key, record.path)

        for callback, is_valid in self._waiters.pop(view_key, []):
            if is_valid():
                callback(instance)

    def unregister(self, record: RouteRecord, key: str, instance: Any = None) -> None:
        """Forget the instance for a slot.

        With *instance*, only unregister if it is still the registered one
        (a newer mount may already have replaced it).
        """
        view_key = (record, key)
        current = self._instances.get(view_key)
        if current is None or (instance is not None and current is not instance):
            return
        del self._instances[view_key]
        self._tearing_down.discard(view_key)

    def begin_teardown(self, record: RouteRecord, key: str) -> None:
        """Mark a slot's instance as being destroyed; it is no longer handed out."""
        if (record, key) in self._instances:
            self._tearing_down.add((record, key))

    def get(self, record: RouteRecord, key: str) -> Any | None:
        """The live instance for a slot, or ``None``."""
        view_key = (record, key)
        if view_key in self._tearing_down:
            return None
        return self._instances.get(view_key)

    def when_ready(
        self,
        record: RouteRecord,
        key: str,
        callback: Callable[[Any], Any],
        is_valid: Callable[[], bool],
    ) -> None:
        """Call ``callback(instance)`` once the slot has a live instance.

        Dropped silently once ``is_valid()`` turns false.
        """
        instance = self.get(record, key)
        if instance is not None:
            callback(instance)
            return
        if not is_valid():
            return

        view_key = (record, key)
        waiters = [w for w in self._waiters.get(view_key, []) if w[1]()]
        waiters.append((callback, is_valid))
        self._waiters[view_key] = waiters

    def pending(self, record: RouteRecord, key: str) -> int:
        """Number of waiters still queued for a slot."""
        return len(self._waiters.get((record, key), []))
