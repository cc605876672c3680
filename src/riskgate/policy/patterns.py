"""Glob-style path patterns used by every policy rule.

``*`` matches any run of characters inside one path segment and ``**``
matches across segments (including the empty run). Matching is anchored to
the whole path, case-sensitive, and always uses forward slashes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

_GLOBSTAR = "**"


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a path pattern into an anchored regular expression."""
    parts: list[str] = []
    for index, chunk in enumerate(pattern.split(_GLOBSTAR)):
        if index:
            parts.append(".*")
        parts.append("[^/]*".join(re.escape(piece) for piece in chunk.split("*")))
    return re.compile("".join(parts))


def match_any(path: str, patterns: Iterable[str]) -> bool:
    """Return True when ``path`` fully matches at least one pattern."""
    return any(compile_pattern(pattern).fullmatch(path) for pattern in patterns)


def filter_matches(paths: Iterable[str], patterns: Iterable[str]) -> list[str]:
    """Return the paths matching any pattern, preserving input order."""
    compiled = [compile_pattern(pattern) for pattern in patterns]
    return [path for path in paths if any(regex.fullmatch(path) for regex in compiled)]
