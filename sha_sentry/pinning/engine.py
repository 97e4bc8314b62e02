"""
Pin engine: walks, classifies, resolves, then reports or rewrites.

Each file is read once and kept in two forms: a parsed document tree, used to
find the `uses:` sites, and the list of raw lines, used for line numbers and
rewriting. The two are joined by the reference text only: a line is
rewritten when its token is a reference the tree walk resolved.
"""

import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from sha_sentry.errors import DocumentError, ErrorKind, FileWriteError
from sha_sentry.exclusion import match_exclusion
from sha_sentry.github.resolver import ShaResolver
from sha_sentry.models import (
    Classification,
    Exclusion,
    FileResult,
    Finding,
    Mode,
    Resolved,
    RunResult,
    RunStatistics,
    SiteWarning,
    UnresolvedReason,
    format_path,
)
from sha_sentry.parser.document import load_document
from sha_sentry.parser.walker import find_line, iter_invocation_sites
from sha_sentry.pinning.classifier import classify
from sha_sentry.pinning.rewrite import rewrite_lines, write_atomic

logger = logging.getLogger(__name__)

_UNRESOLVED_KINDS = {
    UnresolvedReason.NOT_FOUND: ErrorKind.RESOLUTION_NOT_FOUND,
    UnresolvedReason.AMBIGUOUS_OR_MISSING: ErrorKind.RESOLUTION_AMBIGUOUS,
    UnresolvedReason.TRANSIENT_API_FAILURE: ErrorKind.RESOLUTION_TRANSIENT_FAILURE,
}


def format_replacement(pinned: str, original: str) -> str:
    return f"{pinned}  # {original}"


class PinEngine:
    """
    Runs the pin pipeline over a set of files.

    Args:
        resolver: Resolves eligible references to commit SHAs.
        exclude_patterns: Ordered exclusion patterns, matched against
            references and against file paths relative to `root`.
        root: Working root used for relative paths; defaults to the cwd.
    """

    def __init__(
        self,
        resolver: ShaResolver,
        exclude_patterns: Iterable[str] = (),
        root: Optional[str] = None,
    ):
        self.resolver = resolver
        self.exclude_patterns = [p for p in exclude_patterns if p and p.strip()]
        self.root = Path(root) if root else Path.cwd()

    def _display_path(self, path: str) -> str:
        try:
            return Path(path).resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return Path(path).as_posix()

    def process_file(
        self,
        path: str,
        mode: Mode = Mode.REPORT,
        dry_run: bool = False,
        stats: Optional[RunStatistics] = None,
    ) -> FileResult:
        """Process a single file. Errors are recorded on the result, never raised."""
        stats = stats if stats is not None else RunStatistics()
        rel_path = self._display_path(path)
        result = FileResult(file_path=rel_path)
        logger.info("Processing %s", rel_path)

        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                text = f.read()
            root = load_document(text)
        except (OSError, UnicodeDecodeError, DocumentError) as e:
            logger.warning("Skipping %s: %s", rel_path, e)
            result.warnings.append(SiteWarning(
                file_path=rel_path,
                kind=ErrorKind.FILE_READ_OR_PARSE,
                message=str(e),
            ))
            return result

        stats.files_scanned += 1
        lines = text.splitlines(keepends=True)

        file_pattern = match_exclusion(rel_path, self.exclude_patterns)
        if file_pattern is not None:
            logger.info("Excluding %s (matches exclude pattern: %s)", rel_path, file_pattern)
            result.exclusions.append(Exclusion(file_path=rel_path, pattern=file_pattern))

        # token as written -> pinned reference
        replacements: dict[str, str] = {}

        for site in iter_invocation_sites(root, stats):
            raw = site.raw_reference
            line_number = find_line(lines, raw)
            classification = classify(raw, self.exclude_patterns, file_path=rel_path)
            kind = classification.kind

            if kind is Classification.EXCLUDED_BY_PATTERN:
                if file_pattern is None:
                    logger.info("  Skipping %s (matches exclude pattern: %s)", raw, classification.pattern)
                    result.exclusions.append(Exclusion(
                        file_path=rel_path,
                        pattern=classification.pattern or "",
                        reference=raw,
                        path=site.path,
                        line_number=line_number,
                    ))
                continue

            if kind is Classification.MALFORMED:
                logger.warning("%s:%s: %s", rel_path, line_number or "?", classification.detail)
                result.warnings.append(SiteWarning(
                    file_path=rel_path,
                    kind=ErrorKind.MALFORMED_REFERENCE,
                    message=classification.detail,
                    reference=raw,
                    line_number=line_number,
                ))
                continue

            if kind is not Classification.ELIGIBLE:
                logger.debug("  %s at %s: %s", raw, format_path(site.path), kind.value)
                continue

            stats.sites_eligible += 1
            ref = classification.reference
            outcome = self.resolver.resolve(ref.namespace, ref.name, ref.ref)

            if not isinstance(outcome, Resolved):
                logger.warning("Could not resolve %s: %s", raw, outcome.message)
                result.warnings.append(SiteWarning(
                    file_path=rel_path,
                    kind=_UNRESOLVED_KINDS[outcome.reason],
                    message=outcome.message,
                    reference=raw,
                    line_number=line_number,
                ))
                continue

            stats.sites_resolved += 1
            pinned = ref.pinned_to(outcome.commit_id)
            replacements[raw] = pinned
            logger.info("  %s -> %s", raw, pinned)
            result.findings.append(Finding(
                file_path=rel_path,
                path=site.path,
                line_number=line_number,
                current=raw,
                replacement=format_replacement(pinned, raw),
                commit_id=outcome.commit_id,
            ))

        if mode is Mode.REWRITE and replacements:
            self._rewrite(path, lines, replacements, result, dry_run, stats)

        return result

    def _rewrite(
        self,
        path: str,
        lines: list[str],
        replacements: dict[str, str],
        result: FileResult,
        dry_run: bool,
        stats: RunStatistics,
    ) -> None:
        new_lines, changed, rewritten = rewrite_lines(lines, replacements)
        for raw in replacements:
            if raw in rewritten:
                continue
            logger.warning("%s: %s resolved but no rewritable `uses:` line found", result.file_path, raw)
            result.warnings.append(SiteWarning(
                file_path=result.file_path,
                kind=ErrorKind.REWRITE_UNLOCATED,
                message="resolved but no rewritable `uses:` line found; left unchanged",
                reference=raw,
                line_number=find_line(lines, raw),
            ))
        if not changed:
            return
        result.content = "".join(new_lines)
        result.lines_changed = changed

        if dry_run:
            logger.info("Dry run: %s would pin %d action(s)", result.file_path, changed)
            return

        try:
            write_atomic(path, result.content)
        except FileWriteError as e:
            logger.error("Failed to write %s: %s", result.file_path, e)
            stats.files_failed += 1
            result.warnings.append(SiteWarning(
                file_path=result.file_path,
                kind=ErrorKind.FILE_WRITE,
                message=str(e),
            ))
            return

        result.written = True
        stats.files_changed += 1
        stats.actions_pinned += changed
        logger.info("Updated %s (%d action(s) pinned)", result.file_path, changed)

    def run(self, paths: Iterable[str], mode: Mode = Mode.REPORT, dry_run: bool = False) -> RunResult:
        """Process files in path order and return the aggregated result."""
        stats = RunStatistics()
        ordered = sorted(set(paths))
        logger.info("Running in %s mode over %d file(s)", mode.value, len(ordered))
        t0 = time.monotonic()

        files = [self.process_file(p, mode=mode, dry_run=dry_run, stats=stats) for p in ordered]

        total_ms = (time.monotonic() - t0) * 1000
        logger.info(
            "Completed: %d site(s), %d eligible, %d resolved in %.1fms",
            stats.sites_discovered, stats.sites_eligible, stats.sites_resolved, total_ms,
        )
        return RunResult(mode=mode, dry_run=dry_run, files=files, statistics=stats)
