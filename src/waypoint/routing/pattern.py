"""Path pattern compilation.

Compiles route path templates into an anchored regex plus an ordered list
of parameter keys, and fills templates back into concrete paths.

Grammar::

    /users/:id              named segment
    /users/:id?             optional segment
    /files/:path*           zero or more segments
    /files/:path+           one or more segments
    /users/:id(\\d+)         named segment with a custom pattern
    /items/(\\d+)            unnamed group (keys 0, 1, ...)
    *                       catch-all (key 0, exposed as ``pathMatch``)
    /a\\:b                   escaped literal
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

logger = logging.getLogger("waypoint.routing")

DEFAULT_DELIMITER = "/"

# One token of the path grammar. Groups:
#   1 escaped char   2 prefix   3 name   4 name's custom pattern
#   5 unnamed group pattern     6 modifier   7 bare asterisk
_TOKEN_RE = re.compile(
    r"(\\.)"
    r"|([/.])?(?:(?::(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))"
)

_ESCAPE_GROUP_RE = re.compile(r"([=!:$/()])")

# encodeURI's unreserved set, minus the characters a segment cannot carry
_PRETTY_SAFE = ";,:@&=+$-_.!~*'()"
_ASTERISK_SAFE = _PRETTY_SAFE + "/"


@dataclass(frozen=True, slots=True)
class PatternKey:
    """A parameter slot in a compiled pattern.

    Named:     ``:id``   (name="id")
    Unnamed:   ``(\\d+)`` (name=0, 1, ...)
    Asterisk:  ``*``     (name=0, asterisk=True)
    """

    name: str | int
    prefix: str
    delimiter: str
    optional: bool
    repeat: bool
    partial: bool
    asterisk: bool
    pattern: str

    @property
    def param(self) -> str:
        """The key under which this slot appears in ``Route.params``."""
        if isinstance(self.name, str):
            return self.name
        return "pathMatch" if self.name == 0 else str(self.name)


type Token = str | PatternKey


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled route path: regex, ordered keys, and source tokens."""

    source: str
    regex: re.Pattern[str]
    keys: tuple[PatternKey, ...]
    tokens: tuple[Token, ...]

    def match(self, path: str) -> re.Match[str] | None:
        return self.regex.match(path)


def parse_pattern(path: str, delimiter: str = DEFAULT_DELIMITER) -> list[Token]:
    """Tokenize a path template into literal strings and ``PatternKey``s.

    Examples::

        "/users"          -> ["/users"]
        "/users/:id"      -> ["/users", PatternKey(name="id", prefix="/", ...)]
        "/files/:p*"      -> ["/files", PatternKey(name="p", optional=True, repeat=True, ...)]
    """
    tokens: list[Token] = []
    key_index = 0
    index = 0
    literal = ""

    for m in _TOKEN_RE.finditer(path):
        literal += path[index : m.start()]
        index = m.end()

        escaped = m.group(1)
        if escaped:
            literal += escaped[1]
            continue

        prefix, name, capture, group, modifier, asterisk = m.group(2, 3, 4, 5, 6, 7)
        following = path[index : index + 1]

        if literal:
            tokens.append(literal)
            literal = ""

        key_delimiter = prefix or delimiter
        pattern = capture or group
        if pattern:
            pattern = _ESCAPE_GROUP_RE.sub(r"\\\1", pattern)
        elif asterisk:
            pattern = ".*"
        else:
            pattern = f"[^{re.escape(key_delimiter)}]+?"

        if name is None:
            name_or_index: str | int = key_index
            key_index += 1
        else:
            name_or_index = name

        tokens.append(
            PatternKey(
                name=name_or_index,
                prefix=prefix or "",
                delimiter=key_delimiter,
                optional=modifier in ("?", "*"),
                repeat=modifier in ("+", "*"),
                partial=prefix is not None and following != "" and following != prefix,
                asterisk=bool(asterisk),
                pattern=pattern,
            )
        )

    literal += path[index:]
    if literal:
        tokens.append(literal)
    return tokens


def compile_pattern(
    path: str,
    *,
    sensitive: bool = False,
    strict: bool = False,
    end: bool = True,
    delimiter: str = DEFAULT_DELIMITER,
) -> CompiledPattern:
    """Compile a path template into a ``CompiledPattern``.

    Without *strict* a single trailing delimiter is optional. Without
    *end* the pattern matches a prefix that stops at a delimiter.
    Matching is case-insensitive unless *sensitive*.
    """
    tokens = parse_pattern(path, delimiter)
    keys: list[PatternKey] = []
    route = ""

    for token in tokens:
        if isinstance(token, str):
            route += re.escape(token)
            continue

        prefix = re.escape(token.prefix)
        capture = f"(?:{token.pattern})"
        keys.append(token)

        if token.repeat:
            capture += f"(?:{prefix}{capture})*"

        if token.optional:
            if not token.partial:
                capture = f"(?:{prefix}({capture}))?"
            else:
                capture = f"{prefix}({capture})?"
        else:
            capture = f"{prefix}({capture})"

        route += capture

    escaped_delimiter = re.escape(delimiter)
    ends_with_delimiter = route.endswith(escaped_delimiter)

    if not strict:
        if ends_with_delimiter:
            route = route[: -len(escaped_delimiter)]
        route += f"(?:{escaped_delimiter}(?=$))?"

    if end:
        route += "$"
    elif not (strict and ends_with_delimiter):
        route += f"(?={escaped_delimiter}|$)"

    flags = 0 if sensitive else re.IGNORECASE
    return CompiledPattern(
        source=path,
        regex=re.compile(f"^{route}", flags),
        keys=tuple(keys),
        tokens=tuple(tokens),
    )


def _encode_pretty(value: str) -> str:
    return quote(value, safe=_PRETTY_SAFE)


def _encode_asterisk(value: str) -> str:
    return quote(value, safe=_ASTERISK_SAFE)


def build_path(tokens: tuple[Token, ...] | list[Token], params: Mapping[str, Any]) -> str:
    """Fill *tokens* with *params*.

    Raises ``TypeError`` if a required param is missing or a value does
    not match its segment pattern.
    """
    path = ""
    for token in tokens:
        if isinstance(token, str):
            path += token
            continue

        value = params.get(token.param)
        if value is None:
            if token.optional:
                if token.partial:
                    path += token.prefix
                continue
            msg = f'Expected "{token.param}" to be defined'
            raise TypeError(msg)

        segment_re = re.compile(f"^(?:{token.pattern})$")

        if isinstance(value, list | tuple):
            if not token.repeat:
                msg = f'Expected "{token.param}" to not repeat, but received {list(value)!r}'
                raise TypeError(msg)
            if not value:
                if token.optional:
                    continue
                msg = f'Expected "{token.param}" to not be empty'
                raise TypeError(msg)
            for i, item in enumerate(value):
                segment = _encode_pretty(str(item))
                if not segment_re.match(segment):
                    msg = f'Expected all "{token.param}" to match "{token.pattern}", but received {segment!r}'
                    raise TypeError(msg)
                path += (token.prefix if i == 0 else token.delimiter) + segment
            continue

        raw = str(value)
        segment = _encode_asterisk(raw) if token.asterisk else _encode_pretty(raw)
        if not segment_re.match(segment):
            msg = f'Expected "{token.param}" to match "{token.pattern}", but received {segment!r}'
            raise TypeError(msg)
        path += token.prefix + segment

    return path


_FILL_CACHE: dict[str, tuple[Token, ...]] = {}


def fill_params(path: str, params: Mapping[str, Any] | None, route_msg: str) -> str:
    """Expand a route path template with concrete params.

    A missing or malformed param is logged and yields ``""`` so callers
    degrade to a no-match route instead of failing.
    """
    tokens = _FILL_CACHE.get(path)
    if tokens is None:
        tokens = tuple(parse_pattern(path))
        _FILL_CACHE[path] = tokens
    try:
        return build_path(tokens, params or {})
    except TypeError as exc:
        logger.warning("missing param for %s: %s", route_msg, exc)
        return ""
