"""
Reference classifier: decides what to do with a `uses:` value.

Local actions (./path) and container images (docker://) cannot be pinned to a
commit here. A reference already pinned to a full 40-character SHA is left
alone. Everything else shaped like owner/repo@ref is eligible for resolution.
"""

import logging
import re
from typing import Iterable, Optional

from sha_sentry.errors import MalformedReferenceError
from sha_sentry.exclusion import match_exclusion
from sha_sentry.models import ActionReference, Classification, ClassificationResult

logger = logging.getLogger(__name__)

LOCAL_PREFIXES = ("./", "../")
DOCKER_PREFIX = "docker://"

SHA_PATTERN = re.compile(r"[0-9a-fA-F]{40}")


def is_commit_sha(ref: str) -> bool:
    return SHA_PATTERN.fullmatch(ref) is not None


def parse_action_reference(raw: str) -> ActionReference:
    """
    Split 'owner/repo@ref' into its parts.

    Raises:
        MalformedReferenceError: If there is no '@', the ref is empty, or the
            part before '@' is not exactly two non-empty '/' segments.
    """
    if "@" not in raw:
        raise MalformedReferenceError(f"'{raw}' has no @ref")
    action_path, ref = raw.rsplit("@", 1)
    if not ref:
        raise MalformedReferenceError(f"'{raw}' has an empty ref")
    parts = action_path.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedReferenceError(f"'{raw}' is not of the form owner/repo@ref")
    return ActionReference(namespace=parts[0], name=parts[1], ref=ref, raw_text=raw)


def classify(
    raw: str,
    exclude_patterns: Iterable[str] = (),
    file_path: Optional[str] = None,
) -> ClassificationResult:
    """
    Classify a raw `uses:` value. Never raises.

    The first applicable rule wins: exclusion (of the reference, then of the
    containing file), local path, container image, already pinned, eligible,
    and finally malformed.
    """
    patterns = list(exclude_patterns)
    pattern = match_exclusion(raw, patterns, reference=True)
    if pattern is None and file_path:
        pattern = match_exclusion(file_path, patterns)
    if pattern is not None:
        return ClassificationResult(
            kind=Classification.EXCLUDED_BY_PATTERN,
            pattern=pattern,
            detail=f"excluded by pattern '{pattern}'",
        )

    if raw.startswith(LOCAL_PREFIXES):
        return ClassificationResult(kind=Classification.LOCAL_PATH, detail="local action")

    if raw.startswith(DOCKER_PREFIX):
        return ClassificationResult(kind=Classification.CONTAINER_IMAGE, detail="container image")

    try:
        reference = parse_action_reference(raw)
    except MalformedReferenceError as e:
        return ClassificationResult(kind=Classification.MALFORMED, detail=str(e))

    if is_commit_sha(reference.ref):
        return ClassificationResult(
            kind=Classification.ALREADY_PINNED,
            reference=reference,
            detail="already pinned to a commit SHA",
        )

    return ClassificationResult(kind=Classification.ELIGIBLE, reference=reference)
