"""
File discovery: find pipeline definition files under a scan path.

A scan path can be:
  - a single file, used as-is
  - a repository root, scanned for .github/workflows/*.yml|*.yaml plus
    composite actions (action.yml at the root and under .github/actions/)
  - a workflows directory itself, scanned for *.yml|*.yaml
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")
ACTION_FILENAMES = ("action.yml", "action.yaml")


def _yaml_files(directory: Path) -> list[Path]:
    return [f for f in directory.iterdir() if f.is_file() and f.suffix in YAML_SUFFIXES]


def discover_files(scan_path: str, include_composite: bool = True) -> list[str]:
    """
    Return the sorted, de-duplicated pipeline files under `scan_path`.

    Raises:
        FileNotFoundError: If scan_path does not exist.
    """
    path = Path(scan_path)
    if path.is_file():
        return [str(path)]
    if not path.is_dir():
        raise FileNotFoundError(f"Path not found: {scan_path}")

    found: set[Path] = set()
    workflows_dir = path / ".github" / "workflows"
    if workflows_dir.is_dir():
        found.update(_yaml_files(workflows_dir))
    else:
        found.update(f for f in _yaml_files(path) if f.name not in ACTION_FILENAMES)

    if include_composite:
        for name in ACTION_FILENAMES:
            candidate = path / name
            if candidate.is_file():
                found.add(candidate)
        actions_dir = path / ".github" / "actions"
        if actions_dir.is_dir():
            for name in ACTION_FILENAMES:
                found.update(p for p in actions_dir.rglob(name) if p.is_file())

    files = sorted(str(p) for p in found)
    logger.debug("Found %d pipeline file(s) in %s", len(files), scan_path)
    return files
