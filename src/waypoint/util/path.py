"""Path string helpers: relative resolution, splitting, and cleanup."""

import re
from typing import NamedTuple

_DOUBLE_SLASH_RE = re.compile(r"//")


class SplitPath(NamedTuple):
    """A raw path split into its path, query, and hash parts.

    ``query`` has no leading ``?``; ``hash`` keeps its leading ``#``.
    """

    path: str
    query: str
    hash: str


def resolve_path(relative: str, base: str, append: bool = False) -> str:
    """Resolve *relative* against *base*, honoring ``.`` and ``..``.

    Examples::

        resolve_path("/abs", "/a/b")          -> "/abs"
        resolve_path("c", "/a/b")             -> "/a/c"
        resolve_path("c", "/a/b", append=True) -> "/a/b/c"
        resolve_path("../c", "/a/b/d")        -> "/a/c"
        resolve_path("?x=1", "/a")            -> "/a?x=1"

    Without *append* the last segment of *base* is treated as a file and
    replaced; with it, *base* is treated as a directory and extended. A
    base ending in ``/`` is always a directory.
    """
    first = relative[:1]
    if first == "/":
        return relative
    if first in ("?", "#"):
        return base + relative

    stack = base.split("/")
    if not append or not stack[-1]:
        stack.pop()

    for segment in relative.removeprefix("/").split("/"):
        if segment == "..":
            if stack:
                stack.pop()
        elif segment != ".":
            stack.append(segment)

    if not stack or stack[0] != "":
        stack.insert(0, "")

    return "/".join(stack)


def split_path(path: str) -> SplitPath:
    """Split ``"/p?q=1#h"`` into ``SplitPath("/p", "q=1", "#h")``."""
    path, sep, hash_part = path.partition("#")
    hash_ = sep + hash_part
    path, _, query = path.partition("?")
    return SplitPath(path=path, query=query, hash=hash_)


def clean_path(path: str) -> str:
    """Collapse doubled slashes: ``"/a//b"`` -> ``"/a/b"``."""
    return _DOUBLE_SLASH_RE.sub("/", path)
