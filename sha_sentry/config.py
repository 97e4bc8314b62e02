"""
Configuration file support for sha-sentry.

Looks for a .sha-sentry.yml file in the project root and loads settings
that control which references are left alone and how the run behaves.

Example .sha-sentry.yml:

    # Patterns matched against action references and workflow paths
    # (globs or plain substrings, case-insensitive; in references `*`
    # also matches the owner/repo `/`)
    exclude:
      - "my-org/"
      - "*internal-*"
      - "**/legacy-*.yml"

    # report (default) or rewrite
    mode: report

    # Compute rewrites without writing files
    dry_run: false

    # GitHub Enterprise API root
    api_url: https://github.example.com/api/v3

Environment variables (as set by the GitHub Action wrapper):
    EXCLUDE_PATTERNS  comma-separated patterns, appended to `exclude`
    DRY_RUN           "true" to force a dry run
    GITHUB_API_URL    API root, used when the file does not set `api_url`
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from sha_sentry.github.client import DEFAULT_API_URL, DEFAULT_TIMEOUT_S
from sha_sentry.models import Mode

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".sha-sentry.yml"


@dataclass
class Config:
    """Parsed sha-sentry configuration."""
    exclude: list[str] = field(default_factory=list)
    mode: Mode = Mode.REPORT
    dry_run: bool = False
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT_S


def split_patterns(value: Any) -> list[str]:
    """Normalize a list or comma-separated string of patterns, dropping blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v is not None]
    else:
        logger.warning("Ignoring exclude value of type %s", type(value).__name__)
        return []
    return [p.strip() for p in items if p.strip()]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_mode(value: Any) -> Mode:
    try:
        return Mode(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown mode '%s', using 'report'", value)
        return Mode.REPORT


def _apply_env(config: Config) -> Config:
    env_patterns = split_patterns(os.environ.get("EXCLUDE_PATTERNS"))
    if env_patterns:
        logger.debug("Adding %d exclude pattern(s) from EXCLUDE_PATTERNS", len(env_patterns))
        config.exclude.extend(p for p in env_patterns if p not in config.exclude)
    if _parse_bool(os.environ.get("DRY_RUN", "false")):
        config.dry_run = True
    return config


def load_config(config_path: Optional[str] = None, scan_path: Optional[str] = None) -> Config:
    """
    Load configuration from a .sha-sentry.yml file, then apply environment overrides.

    Search order:
      1. Explicit config_path if provided
      2. .sha-sentry.yml in the scan_path directory (or its parent if scan_path is a file),
         then each parent directory
      3. .sha-sentry.yml in the current working directory

    Returns a Config with defaults if no config file is found.
    """
    path = _find_config_file(config_path, scan_path)
    default_api_url = os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL

    if path is None:
        logger.debug("No config file found, using defaults")
        return _apply_env(Config(api_url=default_api_url))

    logger.info("Loading config from %s", path)

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        logger.warning("Config file is not a YAML mapping, using defaults")
        return _apply_env(Config(api_url=default_api_url))

    try:
        timeout = float(raw.get("timeout", DEFAULT_TIMEOUT_S))
    except (TypeError, ValueError):
        logger.warning("Invalid timeout '%s', using %.0fs", raw.get("timeout"), DEFAULT_TIMEOUT_S)
        timeout = DEFAULT_TIMEOUT_S

    config = Config(
        exclude=split_patterns(raw.get("exclude")),
        mode=_parse_mode(raw.get("mode", "report")),
        dry_run=_parse_bool(raw.get("dry_run", False)),
        api_url=str(raw.get("api_url") or default_api_url),
        timeout=timeout,
    )
    return _apply_env(config)


def _find_config_file(
    config_path: Optional[str] = None,
    scan_path: Optional[str] = None,
) -> Optional[str]:
    """Find the config file, returning its path or None."""
    # 1. Explicit path
    if config_path:
        p = Path(config_path)
        if p.is_file():
            return str(p)
        logger.warning("Config file not found: %s", config_path)
        return None

    # 2. Relative to scan path
    if scan_path:
        scan_p = Path(scan_path)
        if scan_p.is_file():
            scan_p = scan_p.parent
        candidate = scan_p / DEFAULT_CONFIG_FILENAME
        if candidate.is_file():
            return str(candidate)
        # Walk up to find it (e.g. scan_path is .github/workflows/)
        for parent in scan_p.parents:
            candidate = parent / DEFAULT_CONFIG_FILENAME
            if candidate.is_file():
                return str(candidate)

    # 3. Current working directory
    cwd_candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
    if cwd_candidate.is_file():
        return str(cwd_candidate)

    return None
