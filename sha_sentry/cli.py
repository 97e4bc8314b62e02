"""
CLI entry point: ties together discovery → engine → GitHub resolver → reporter.

Usage:
  # Report unpinned actions in a repository (no files are changed):
  python3 -m sha_sentry scan .

  # Rewrite workflow files in place, pinning every resolvable action:
  python3 -m sha_sentry pin .

  # See what would change without writing:
  python3 -m sha_sentry pin . --dry-run

  # Machine-readable output:
  python3 -m sha_sentry scan .github/workflows/ --format json

Exit codes:
  0 — nothing to pin (report mode) or run completed (rewrite mode)
  1 — report mode found actions that can be pinned
  2 — error (bad input, bad config, or a file failed to write)
"""

import logging
import os
import sys
from typing import Optional

import click
import yaml

from sha_sentry.config import load_config, split_patterns
from sha_sentry.github import GitHubClient, ShaResolver
from sha_sentry.models import Mode
from sha_sentry.outputs import write_outputs
from sha_sentry.parser import discover_files
from sha_sentry.pinning import PinEngine
from sha_sentry.reporter import report_console, report_json, report_sarif

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _shared_options(func):
    options = [
        click.argument("path"),
        click.option("--exclude", "excludes", multiple=True, help="Exclude pattern (glob or substring); repeatable."),
        click.option("--config", "config_path", default=None, help="Path to .sha-sentry.yml config file."),
        click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token (default: $GITHUB_TOKEN)."),
        click.option("--api-url", default=None, help="GitHub API root (overrides config / $GITHUB_API_URL)."),
        click.option("--dry-run", is_flag=True, help="Compute rewrites but do not write files."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool):
    """SHA Sentry — pin GitHub Actions to immutable commit SHAs."""
    _setup_logging(verbose)


@cli.command()
@_shared_options
@click.option("--mode", type=click.Choice([m.value for m in Mode]), default=None, help="report (default) or rewrite (overrides config file).")
@click.option("--format", "output_format", type=click.Choice(["console", "json", "sarif"]), default="console", help="Output format.")
def scan(path, excludes, config_path, token, api_url, dry_run, mode, output_format):
    """Report actions that are not pinned to a commit SHA.

    Exits with code 0 if everything is pinned, 1 if actions can be pinned, 2 on error.
    """
    _execute(path, excludes, config_path, token, api_url, dry_run, mode, output_format)


@cli.command()
@_shared_options
@click.option("--format", "output_format", type=click.Choice(["console", "json"]), default="console", help="Output format.")
def pin(path, excludes, config_path, token, api_url, dry_run, output_format):
    """Rewrite workflow files, pinning actions to commit SHAs.

    The original reference is kept in a trailing comment on each rewritten line.
    """
    _execute(path, excludes, config_path, token, api_url, dry_run, Mode.REWRITE.value, output_format)


def _execute(
    path: str,
    excludes: tuple[str, ...],
    config_path: Optional[str],
    token: Optional[str],
    api_url: Optional[str],
    dry_run: bool,
    mode: Optional[str],
    output_format: str,
) -> None:
    path = os.path.abspath(path)

    # Load config file (CLI flags override config values)
    try:
        config = load_config(config_path=config_path, scan_path=path)
    except (yaml.YAMLError, OSError) as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(EXIT_ERROR)

    effective_mode = Mode(mode) if mode else config.mode
    effective_dry_run = dry_run or config.dry_run
    exclude_patterns = config.exclude + [p for p in split_patterns(list(excludes)) if p not in config.exclude]

    try:
        files = discover_files(path)
    except (FileNotFoundError, NotADirectoryError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if not files:
        click.echo("No workflow files found.")
        sys.exit(EXIT_OK)

    if not token:
        logger.warning("No GitHub token configured; unauthenticated API calls are heavily rate limited")

    with GitHubClient(token=token, api_url=api_url or config.api_url, timeout=config.timeout) as client:
        engine = PinEngine(ShaResolver(client), exclude_patterns=exclude_patterns)
        result = engine.run(files, mode=effective_mode, dry_run=effective_dry_run)

    if output_format == "json":
        click.echo(report_json(result))
    elif output_format == "sarif":
        click.echo(report_sarif(result))
    else:
        report_console(result, file_path=path)

    try:
        write_outputs(result)
    except OSError as e:
        click.echo(f"Warning: could not write step outputs: {e}", err=True)

    if not result.ok:
        click.echo(f"Error: {result.statistics.files_failed} file(s) could not be written.", err=True)
        sys.exit(EXIT_ERROR)
    if effective_mode is Mode.REPORT and result.findings:
        sys.exit(EXIT_FINDINGS)
    sys.exit(EXIT_OK)
