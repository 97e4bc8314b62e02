"""
Exclusion matching for files and action references.

Patterns are matched case-insensitively. A pattern containing glob
metacharacters is matched as a glob against the whole candidate:

    *      anything except '/'
    **     anything, across directories ("**/" also matches no directory)
    ?      one character except '/'
    [...]  character class

Action references have a single '/' between owner and repo, so when the
candidate is a reference (`reference=True`) `*` and `?` also match '/':
"*checkout*" excludes "actions/checkout@v4".

A pattern without metacharacters is a plain substring match, so
"my-org/" excludes every action published by `my-org`. The same patterns
are checked against workflow file paths, so "actions/" would also exclude
every composite action under .github/actions/.
A malformed glob falls back to substring containment instead of failing.
"""

import logging
import re
from functools import lru_cache
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")


def _translate(pattern: str, cross_slash: bool = False) -> str:
    """Translate a glob pattern into a regex string. Raises ValueError if malformed."""
    star, one = (".*", ".") if cross_slash else ("[^/]*", "[^/]")
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    i += 1
                    out.append("(?:.*/)?")
                else:
                    out.append(".*")
                continue
            out.append(star)
        elif c == "?":
            out.append(one)
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end == -1:
                raise ValueError(f"unterminated character class in {pattern!r}")
            body = pattern[i + 1:end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            elif body.startswith("^"):
                body = "\\" + body
            out.append("[" + body + "]")
            i = end
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


@lru_cache(maxsize=256)
def _compile(pattern: str, cross_slash: bool = False) -> Optional[re.Pattern]:
    """Compile a glob pattern, or return None if it should be used as a substring."""
    if not _GLOB_CHARS.intersection(pattern):
        return None
    try:
        return re.compile(_translate(pattern, cross_slash), re.IGNORECASE | re.DOTALL)
    except (ValueError, re.error) as e:
        logger.debug("Pattern %r is not a valid glob (%s); using substring match", pattern, e)
        return None


def _normalize(candidate: str) -> str:
    return candidate.replace("\\", "/")


def pattern_matches(candidate: str, pattern: str, reference: bool = False) -> bool:
    """Return True if a single pattern matches the candidate."""
    candidate = _normalize(candidate)
    regex = _compile(pattern, reference)
    if regex is None:
        return pattern.lower() in candidate.lower()
    return regex.fullmatch(candidate) is not None


def match_exclusion(candidate: str, patterns: Iterable[str], reference: bool = False) -> Optional[str]:
    """
    Return the first pattern that excludes `candidate`, or None.

    Args:
        candidate: A path relative to the working root, or a raw
                   action reference such as "actions/checkout@v4".
        patterns: Ordered exclusion patterns; blank entries are ignored.
        reference: True when candidate is an action reference.
    """
    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue
        if pattern_matches(candidate, pattern.strip(), reference):
            logger.debug("'%s' excluded by pattern '%s'", candidate, pattern)
            return pattern
    return None


def is_excluded(candidate: str, patterns: Iterable[str], reference: bool = False) -> bool:
    return match_exclusion(candidate, patterns, reference) is not None
