"""Query string codec.

Queries are plain dicts mapping a key to a string, a list of strings
(repeated keys), or ``None`` (a bare key without ``=``). The router lets
callers swap either direction through ``RouterConfig.parse_query`` and
``RouterConfig.stringify_query``; these are the defaults.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote, unquote

logger = logging.getLogger("waypoint.routing")

type QueryValue = str | list[str | None] | None


def encode(value: str) -> str:
    """RFC 3986 component encoding: escapes ``!'()*`` and keeps commas."""
    return quote(value, safe=",")


def decode(value: str) -> str:
    return unquote(value)


def parse_query(query: str) -> dict[str, QueryValue]:
    """Parse a query string into a dict.

    A leading ``?``, ``#`` or ``&`` is ignored, ``+`` decodes to a space,
    repeated keys collect into a list, and a key without ``=`` maps to
    ``None``::

        parse_query("?a=1&a=2&b")  -> {"a": ["1", "2"], "b": None}
    """
    result: dict[str, Any] = {}
    query = query.strip()
    if query[:1] in ("?", "#", "&"):
        query = query[1:]
    if not query:
        return result

    for param in query.split("&"):
        parts = param.replace("+", " ").split("=")
        key = decode(parts[0])
        value = decode("=".join(parts[1:])) if len(parts) > 1 else None

        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]

    return result


def stringify_query(query: Mapping[str, Any] | None) -> str:
    """Serialize a query dict to ``"?k=v&..."``, or ``""`` when empty.

    ``None`` values serialize as a bare key; lists expand to one pair per
    item (``None`` items become bare keys).
    """
    if not query:
        return ""

    pairs: list[str] = []
    for key, value in query.items():
        if value is None:
            pairs.append(encode(key))
        elif isinstance(value, list | tuple):
            for item in value:
                if item is None:
                    pairs.append(encode(key))
                else:
                    pairs.append(f"{encode(key)}={encode(str(item))}")
        else:
            pairs.append(f"{encode(key)}={encode(str(value))}")

    joined = "&".join(p for p in pairs if p)
    return f"?{joined}" if joined else ""


def resolve_query(
    query: str | None,
    extra: Mapping[str, Any] | None = None,
    parse: Callable[[str], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Parse *query* and overlay *extra* on top (explicit values win).

    A failing custom parser is logged and treated as an empty query.
    """
    parser = parse or parse_query
    try:
        parsed = dict(parser(query or ""))
    except ValueError as exc:
        logger.warning("Could not parse query %r: %s", query, exc)
        parsed = {}
    if extra:
        parsed.update(extra)
    return parsed
