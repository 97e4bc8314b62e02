"""
GitHub Actions step outputs.

When running inside a workflow, GITHUB_OUTPUT names a file that collects
`key=value` lines; the values become `steps.<id>.outputs.<key>`.
"""

import logging
import os
from typing import Optional

from sha_sentry.models import RunResult

logger = logging.getLogger(__name__)


def build_outputs(result: RunResult) -> dict[str, str]:
    stats = result.statistics
    return {
        "changes_made": str(stats.files_changed > 0).lower(),
        "files_updated": str(stats.files_changed),
        "actions_pinned": str(stats.actions_pinned),
        "files_scanned": str(stats.files_scanned),
        "sites_discovered": str(stats.sites_discovered),
        "unpinned_found": str(stats.sites_resolved),
    }


def write_outputs(result: RunResult, output_path: Optional[str] = None) -> bool:
    """
    Append run outputs to GITHUB_OUTPUT (or `output_path`).

    Returns False without doing anything when no output file is configured.
    """
    path = output_path or os.environ.get("GITHUB_OUTPUT")
    if not path:
        return False

    outputs = build_outputs(result)
    with open(path, "a", encoding="utf-8") as f:
        for key, value in outputs.items():
            f.write(f"{key}={value}\n")
    logger.debug("Wrote %d output(s) to %s", len(outputs), path)
    return True
