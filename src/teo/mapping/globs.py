"""Glob matching over repo-relative paths.

Patterns follow the usual shell/test-runner conventions:

- ``*`` and ``?`` never cross a ``/``
- ``**`` matches any number of directories, including none
- ``{a,b}`` alternatives expand before matching (nesting allowed)
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, left to right.

    >>> expand_braces("t/*.{test,spec}.{js,ts}")
    ['t/*.test.js', 't/*.test.ts', 't/*.spec.js', 't/*.spec.ts']
    """
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    depth = 0
    parts: list[str] = []
    last = start + 1
    for i in range(start, len(pattern)):
        c = pattern[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                parts.append(pattern[last:i])
                head, tail = pattern[:start], pattern[i + 1 :]
                out: list[str] = []
                for part in parts:
                    for expanded in expand_braces(head + part + tail):
                        if expanded not in out:
                            out.append(expanded)
                return out
        elif c == "," and depth == 1:
            parts.append(pattern[last:i])
            last = i + 1
    # Unbalanced: treat the brace literally
    return [pattern]


@lru_cache(maxsize=1024)
def _compile(pattern: str) -> re.Pattern[str]:
    regex = ""
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if i + 1 < n and pattern[i + 1] == "*":
                if i + 2 < n and pattern[i + 2] == "/":
                    regex += "(?:.*/)?"
                    i += 3
                    continue
                regex += ".*"
                i += 2
                continue
            regex += "[^/]*"
        elif c == "?":
            regex += "[^/]"
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                regex += re.escape(c)
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                regex += f"[{body}]"
                i = end
        else:
            regex += re.escape(c)
        i += 1
    return re.compile(regex)


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Check if a repo-relative path matches a glob pattern."""
    path = rel_path.removeprefix("./")
    return any(_compile(alt).fullmatch(path) for alt in expand_braces(pattern.removeprefix("./")))


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(matches_glob(rel_path, p) for p in patterns)


class TestLocator:
    """Immutable snapshot of repository files that globs are resolved against.

    Strategies never touch the file system; they ask the locator.
    """

    __test__ = False  # not a pytest class

    def __init__(self, paths: Iterable[str]) -> None:
        self._index = frozenset(paths)
        self._paths: tuple[str, ...] = tuple(sorted(self._index))

    @property
    def paths(self) -> tuple[str, ...]:
        return self._paths

    def glob(self, pattern: str) -> list[str]:
        """Sorted paths matching ``pattern``."""
        return [p for p in self._paths if matches_glob(p, pattern)]

    def glob_many(self, patterns: Iterable[str]) -> list[str]:
        """Sorted, de-duplicated paths matching any of ``patterns``."""
        pats = list(patterns)
        return [p for p in self._paths if matches_any(p, pats)]

    def __contains__(self, path: object) -> bool:
        return path in self._index

    def __len__(self) -> int:
        return len(self._paths)
