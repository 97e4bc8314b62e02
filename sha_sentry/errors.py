"""
Exception types and warning categories used across sha-sentry.

Per-site and per-file problems are caught where they happen and turned into
warning records tagged with an ErrorKind; only setup failures propagate.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    MALFORMED_REFERENCE = "malformed-reference"
    RESOLUTION_NOT_FOUND = "resolution-not-found"
    RESOLUTION_AMBIGUOUS = "resolution-ambiguous"
    RESOLUTION_TRANSIENT_FAILURE = "resolution-transient-failure"
    FILE_READ_OR_PARSE = "file-read-or-parse"
    FILE_WRITE = "file-write"
    REWRITE_UNLOCATED = "rewrite-unlocated"


class ShaSentryError(Exception):
    """Base class for sha-sentry errors."""


class MalformedReferenceError(ShaSentryError, ValueError):
    """A `uses:` value that cannot be split into owner/repo@ref."""


class DocumentError(ShaSentryError, ValueError):
    """A pipeline file that could not be parsed into a document tree."""


class GitHubAPIError(ShaSentryError):
    """A GitHub API call failed for a reason other than 'not found'."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FileWriteError(ShaSentryError, OSError):
    """A rewritten file could not be persisted."""
