"""
Line-level rewriting of `uses:` directives and atomic file persistence.

The rewriter works on the raw text, one line at a time, so indentation,
quoting, comments and line terminators survive untouched. Only the reference
token changes, and the original reference is always kept in a comment:

    - uses: actions/checkout@v4
    - uses: actions/checkout@<sha>  # actions/checkout@v4
"""

import contextlib
import logging
import os
import re
import shutil
import tempfile
from typing import Mapping, Optional, Sequence

from sha_sentry.errors import FileWriteError

logger = logging.getLogger(__name__)

# `uses:` with optional list marker, optional quotes, optional trailing comment.
USES_LINE = re.compile(
    r"^(?P<prefix>\s*(?:-\s+)?uses:\s*)"
    r"(?P<quote>[\"']?)(?P<ref>[^\s#\"']+)(?P=quote)"
    r"(?P<rest>\s*(?:#.*)?)$"
)


def split_terminator(line: str) -> tuple[str, str]:
    """Split a line into its body and its line terminator ('', '\\n' or '\\r\\n')."""
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def extract_reference(line: str) -> Optional[str]:
    """Return the reference token of a `uses:` line, or None."""
    body, _ = split_terminator(line)
    m = USES_LINE.match(body)
    return m.group("ref") if m else None


def rewrite_line(line: str, replacements: Mapping[str, str]) -> Optional[str]:
    """
    Rewrite one line if its reference token has a replacement.

    Returns the new line (terminator preserved), or None if the line is not
    a `uses:` directive, has no replacement, or would not change.
    """
    body, terminator = split_terminator(line)
    m = USES_LINE.match(body)
    if not m:
        return None

    token = m.group("ref")
    new_ref = replacements.get(token)
    if new_ref is None or new_ref == token:
        return None

    rest = m.group("rest")
    comment = rest.strip()
    if comment and token in comment:
        suffix = rest
    else:
        suffix = f"  # {token}" + (f" {comment}" if comment else "")

    quote = m.group("quote")
    return f"{m.group('prefix')}{quote}{new_ref}{quote}{suffix}{terminator}"


def rewrite_lines(
    lines: Sequence[str], replacements: Mapping[str, str]
) -> tuple[list[str], int, set[str]]:
    """
    Apply rewrite_line to every line.

    Returns (new_lines, number_of_changed_lines, tokens_rewritten). A token
    missing from tokens_rewritten had no single-line `uses:` directive to
    rewrite, e.g. a flow mapping or a folded scalar.
    """
    out = []
    changed = 0
    rewritten: set[str] = set()
    for number, line in enumerate(lines, 1):
        new_line = rewrite_line(line, replacements)
        if new_line is None:
            out.append(line)
            continue
        logger.debug("Line %d: %s -> %s", number, line.strip(), new_line.strip())
        out.append(new_line)
        changed += 1
        rewritten.add(extract_reference(line))
    return out, changed, rewritten


def write_atomic(path: str, content: str) -> None:
    """
    Replace `path` with `content` (UTF-8, line terminators as given).

    Writes a temp file in the same directory and renames it over the target,
    so either the whole new content lands or the original stays in place.

    Raises:
        FileWriteError: If the file could not be written.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".sha-sentry-", suffix=".tmp")
    except OSError as e:
        raise FileWriteError(f"could not create temp file for {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except Exception as e:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise FileWriteError(f"could not write {path}: {e}") from e
