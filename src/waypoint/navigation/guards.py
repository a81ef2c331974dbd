"""Guard extraction — lifecycle guards from route-bound components.

Route records map view slots to opaque component descriptors. Which
guards a descriptor carries is answered by a ``ComponentRegistry``;
the default ``AttributeRegistry`` reads plain attributes::

    class UserView:
        @staticmethod
        def before_route_enter(to, from_, next):   # no instance exists yet
            next()

        def before_route_update(self, to, from_, next):
            self.user_id = to.params["id"]
            next()

        def before_route_leave(self, to, from_, next):
            next(not self.dirty)

Leave and update guards only run for components that have a live
instance in the ``ViewRegistry``; enter guards run before any instance
exists and may pass a callback to ``next`` that receives the instance
once it is mounted.
"""

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from waypoint._internal.types import Guard, Next
from waypoint.navigation.components import LazyComponent, iter_components
from waypoint.routing.record import RouteRecord
from waypoint.views import ViewRegistry

BEFORE_ROUTE_ENTER = "before_route_enter"
BEFORE_ROUTE_UPDATE = "before_route_update"
BEFORE_ROUTE_LEAVE = "before_route_leave"

type Binder = Callable[[Guard, Any, RouteRecord, str], Guard | None]


class ComponentRegistry(Protocol):
    """Answers which guards a component descriptor declares for a hook.

    *instance* is the mounted instance for the slot, when there is one.
    """

    def guards(self, component: Any, hook: str, instance: Any = None) -> Sequence[Guard]: ...


class AttributeRegistry:
    """Reads guards from an attribute named after the hook.

    For class descriptors with a mounted instance the attribute is read
    from the instance, so regular methods arrive bound. The attribute may
    hold a single guard or a list of them.
    """

    __slots__ = ()

    def guards(self, component: Any, hook: str, instance: Any = None) -> Sequence[Guard]:
        if isinstance(component, LazyComponent):
            if not component.is_resolved:
                return []
            component = component.resolved
        owner = instance if instance is not None and isinstance(component, type) else component
        found = getattr(owner, hook, None)
        if found is None:
            return []
        if isinstance(found, list | tuple):
            return [guard for guard in found if guard is not None]
        return [found]


class GuardExtractor:
    """Builds ordered guard lists for the records a transition touches."""

    __slots__ = ("registry", "views")

    def __init__(self, registry: ComponentRegistry, views: ViewRegistry) -> None:
        self.registry = registry
        self.views = views

    def leave_guards(self, deactivated: Sequence[RouteRecord]) -> list[Guard]:
        """Leave guards, innermost component first."""
        return self._extract(deactivated, BEFORE_ROUTE_LEAVE, _bind_instance_guard, reverse=True)

    def update_guards(self, updated: Sequence[RouteRecord]) -> list[Guard]:
        """Update guards of reused records, parent first."""
        return self._extract(updated, BEFORE_ROUTE_UPDATE, _bind_instance_guard)

    def enter_guards(
        self,
        activated: Sequence[RouteRecord],
        post_enter_cbs: list[Callable[[], None]],
        is_valid: Callable[[], bool],
    ) -> list[Guard]:
        """Enter guards of activated records, parent first.

        A callable passed to ``next`` by one of these guards is queued in
        *post_enter_cbs*; flushing the queue hands it the slot's instance
        as soon as one is registered and ``is_valid()`` still holds.
        """

        def bind(guard: Guard, _instance: Any, record: RouteRecord, key: str) -> Guard:
            return self._bind_enter_guard(guard, record, key, post_enter_cbs, is_valid)

        return self._extract(activated, BEFORE_ROUTE_ENTER, bind)

    def _extract(
        self,
        records: Sequence[RouteRecord],
        hook: str,
        bind: Binder,
        reverse: bool = False,
    ) -> list[Guard]:
        per_component: list[list[Guard]] = []
        for record, key, component in iter_components(records):
            instance = self.views.get(record, key)
            bound = [
                b
                for guard in self.registry.guards(component, hook, instance)
                if (b := bind(guard, instance, record, key)) is not None
            ]
            per_component.append(bound)
        if reverse:
            per_component.reverse()
        return [guard for guards in per_component for guard in guards]

    def _bind_enter_guard(
        self,
        guard: Guard,
        record: RouteRecord,
        key: str,
        post_enter_cbs: list[Callable[[], None]],
        is_valid: Callable[[], bool],
    ) -> Guard:
        views = self.views

        def route_enter_guard(to: Any, from_: Any, next: Next) -> Any:
            def enter_next(value: Any = None) -> None:
                if callable(value):
                    post_enter_cbs.append(lambda: views.when_ready(record, key, value, is_valid))
                next(value)

            return guard(to, from_, enter_next)

        return route_enter_guard


def _bind_instance_guard(guard: Guard, instance: Any, _record: RouteRecord, _key: str) -> Guard | None:
    return guard if instance is not None else None
