"""
JSON reporter: outputs a run result as structured JSON for programmatic use.
"""

import json
import logging
from typing import Any

from sha_sentry.models import FileResult, RunResult, format_path

logger = logging.getLogger(__name__)


def _file_entry(fr: FileResult) -> dict[str, Any]:
    return {
        "file_path": fr.file_path,
        "changed": fr.changed,
        "written": fr.written,
        "lines_changed": fr.lines_changed,
        "findings": [
            {
                "path": format_path(f.path),
                "line_number": f.line_number,
                "current": f.current,
                "replacement": f.replacement,
                "commit_id": f.commit_id,
            }
            for f in fr.findings
        ],
        "exclusions": [
            {
                "reference": e.reference,
                "pattern": e.pattern,
                "path": format_path(e.path),
                "line_number": e.line_number,
            }
            for e in fr.exclusions
        ],
        "warnings": [
            {
                "kind": w.kind.value,
                "message": w.message,
                "reference": w.reference,
                "line_number": w.line_number,
            }
            for w in fr.warnings
        ],
    }


def report_json(result: RunResult) -> str:
    """
    Format a run result as a JSON string.

    Args:
        result: The engine's RunResult.

    Returns:
        A JSON string with statistics and per-file details.
    """
    data = {
        "mode": result.mode.value,
        "dry_run": result.dry_run,
        "statistics": result.statistics.as_dict(),
        "total": len(result.findings),
        "files": [_file_entry(fr) for fr in result.files],
    }
    output = json.dumps(data, indent=2)
    logger.info("JSON report: %d finding(s), %d bytes", len(result.findings), len(output))
    return output
