"""Guard outcomes and the continuation handed to every guard.

Guards keep the ``next(...)`` calling convention, but the controller never
inspects raw values: each ``next`` call is classified into one of three
outcomes and the transition iterator matches on that::

    next()              -> Proceed()
    next(False)         -> Abort(reason=False)
    next(exc)           -> Abort(reason=exc)
    next("/login")      -> Redirect(location="/login")
    next({"name": "x"}) -> Redirect(location={"name": "x"})
    next(anything_else) -> Proceed(value=anything_else)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import anyio

from waypoint.location import Location, is_location_like


@dataclass(frozen=True, slots=True)
class Proceed:
    """Continue with the next guard. ``value`` is whatever was passed."""

    value: Any = None


@dataclass(frozen=True, slots=True)
class Abort:
    """Stop the navigation. ``reason`` is ``False`` or an exception."""

    reason: BaseException | bool = False


@dataclass(frozen=True, slots=True)
class Redirect:
    """Stop the navigation and start a new one towards ``location``."""

    location: Any

    @property
    def replace(self) -> bool:
        """Whether the target asked to replace the current entry."""
        if isinstance(self.location, Location):
            return self.location.replace
        if isinstance(self.location, Mapping):
            return bool(self.location.get("replace"))
        return False


type GuardOutcome = Proceed | Abort | Redirect


def classify(value: Any = None) -> GuardOutcome:
    """Map a value passed to ``next`` onto a ``GuardOutcome``."""
    if value is False:
        return Abort(reason=False)
    if isinstance(value, BaseException):
        return Abort(reason=value)
    if is_location_like(value):
        return Redirect(location=value)
    return Proceed(value=value)


class Continuation:
    """The ``next`` callable for one guard invocation.

    Only the first call counts. The transition waits on ``wait()`` until a
    guard calls it, which may happen synchronously inside the guard or
    later from another task.
    """

    __slots__ = ("_done", "outcome")

    def __init__(self) -> None:
        self._done = anyio.Event()
        self.outcome: GuardOutcome | None = None

    def __call__(self, value: Any = None) -> None:
        if self.outcome is not None:
            return
        self.outcome = classify(value)
        self._done.set()

    @property
    def called(self) -> bool:
        return self.outcome is not None

    async def wait(self) -> GuardOutcome:
        await self._done.wait()
        return self.outcome  # type: ignore[return-value]
