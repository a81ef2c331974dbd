"""In-memory navigation backend.

Keeps its own stack of committed routes instead of touching an address
bar, which makes it the backend for tests, servers, and headless use.
"""

from typing import TYPE_CHECKING, Any

from waypoint._internal.types import RawLocation
from waypoint.errors import NavigationDuplicated
from waypoint.history.base import History, OnAbort, OnComplete
from waypoint.route import Route

if TYPE_CHECKING:
    from waypoint.router import Router


class MemoryHistory(History):
    """A history stack held in memory.

    ``push`` drops forward entries and appends, ``replace`` swaps the
    current entry, ``go(n)`` re-enters a stored route. Out-of-range
    ``go`` calls are ignored.
    """

    def __init__(self, router: "Router", base: str | None = None, initial: str = "/") -> None:
        super().__init__(router, base)
        self.stack: list[Route] = []
        self.index = -1
        self.initial = initial

    async def push(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        def complete(route: Route) -> None:
            self.stack = [*self.stack[: self.index + 1], route]
            self.index += 1
            if on_complete is not None:
                on_complete(route)

        await self.transition_to(location, complete, on_abort)

    async def replace(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        def complete(route: Route) -> None:
            if self.index < 0:
                self.stack = [route]
                self.index = 0
            else:
                self.stack = [*self.stack[: self.index], route]
            if on_complete is not None:
                on_complete(route)

        await self.transition_to(location, complete, on_abort)

    async def go(self, n: int) -> None:
        target_index = self.index + n
        if target_index < 0 or target_index >= len(self.stack):
            return
        route = self.stack[target_index]

        def complete(_: Route) -> None:
            self.index = target_index
            self.update_route(route)

        def abort(err: BaseException) -> None:
            if isinstance(err, NavigationDuplicated):
                self.index = target_index

        await self.confirm_transition(route, complete, abort)

    def ensure_url(self, push: bool = False) -> None:
        """Nothing to sync: the stack is the source of truth."""

    def get_current_location(self) -> str:
        if 0 <= self.index < len(self.stack):
            return self.stack[self.index].full_path
        return self.initial

    async def start(self) -> None:
        def setup(_: Any) -> None:
            self.setup_listeners()

        await self.replace(self.get_current_location(), setup, setup)
