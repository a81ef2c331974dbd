"""Router configuration.

RouterConfig is frozen: a router reads it once at construction and the
values never change underneath it.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

type QueryParser = Callable[[str], dict[str, Any]]
type QueryStringifier = Callable[[Mapping[str, Any]], str]

_ORIGIN_RE = re.compile(r"^https?://[^/]+")

MODES = frozenset({"memory"})


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(base="/app", parse_query=my_parser)
    """

    # Prefix prepended to every href produced by Router.resolve()
    base: str = "/"

    # Navigation backend ("memory" is the only built-in one)
    mode: str = "memory"

    # Query codec overrides (None = waypoint.util.query defaults)
    parse_query: QueryParser | None = None
    stringify_query: QueryStringifier | None = None


def normalize_base(base: str | None) -> str:
    """Normalize a router base path.

    Strips a scheme/host origin, ensures a leading slash, and removes a
    trailing slash, so ``"https://example.com/app/"`` becomes ``"/app"``
    and ``"/"`` becomes ``""``.
    """
    if not base:
        base = "/"
    base = _ORIGIN_RE.sub("", base)
    if not base.startswith("/"):
        base = "/" + base
    return base.removesuffix("/")
