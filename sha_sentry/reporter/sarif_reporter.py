"""
SARIF reporter: outputs pinning findings in SARIF 2.1.0 format for GitHub Code Scanning.

Each finding becomes an `unpinned-action` result whose message carries the
recommended replacement, so the PR annotation shows exactly what to write.

Reference: https://docs.github.com/en/code-security/code-scanning/integrating-with-code-scanning/sarif-support-for-code-scanning
"""

import json
import logging
from typing import Any

from sha_sentry import __version__
from sha_sentry.models import Finding, RunResult, format_path

logger = logging.getLogger(__name__)

TOOL_NAME = "sha-sentry"
SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
SARIF_VERSION = "2.1.0"

RULE_ID = "unpinned-action"

_RULE: dict[str, Any] = {
    "id": RULE_ID,
    "name": "UnpinnedAction",
    "shortDescription": {"text": "Action not pinned to a commit SHA"},
    "fullDescription": {
        "text": (
            "Actions referenced by tag or branch can be silently moved by their "
            "owner. Pin to a full commit SHA and keep the version in a comment."
        ),
    },
    "properties": {
        "security-severity": "7.0",
        "tags": ["security", "supply-chain", "github-actions"],
    },
}


def _build_result(f: Finding) -> dict[str, Any]:
    """Build a single SARIF result object from a Finding."""
    return {
        "ruleId": RULE_ID,
        "level": "warning",
        "message": {
            "text": f"'{f.current}' is not pinned to a commit SHA. Use: {f.replacement}",
        },
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {
                        "uri": f.file_path,
                        "uriBaseId": "%SRCROOT%",
                    },
                    # line numbers are best-effort; fall back to the top of the file
                    "region": {"startLine": f.line_number or 1},
                },
                "logicalLocations": [
                    {"name": format_path(f.path), "kind": "member"},
                ],
            }
        ],
        "properties": {"commitId": f.commit_id},
    }


def report_sarif(result: RunResult) -> str:
    """
    Format the findings of a run as a SARIF 2.1.0 JSON string.

    The output can be uploaded to GitHub Code Scanning via:
      gh code-scanning upload-results --sarif results.sarif
    """
    findings = result.findings
    sarif: dict[str, Any] = {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": __version__,
                        "rules": [_RULE] if findings else [],
                    }
                },
                "results": [_build_result(f) for f in findings],
            }
        ],
    }

    output = json.dumps(sarif, indent=2)
    logger.info("SARIF report: %d finding(s), %d bytes", len(findings), len(output))
    return output
