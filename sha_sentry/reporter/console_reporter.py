"""
Console reporter: prints a run summary to the terminal with colors and formatting.

Findings are grouped by file, in discovery order within each file.
"""

from sha_sentry.models import FileResult, Mode, RunResult, format_path


BOLD = "\033[1m"
DIM = "\033[2m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"
RESET = "\033[0m"


def _location(file_path: str, line_number) -> str:
    return f"{file_path}:{line_number}" if line_number else file_path


def _file_section(fr: FileResult, mode: Mode) -> list[str]:
    lines = []
    if not (fr.findings or fr.exclusions or fr.warnings):
        return lines

    lines.append("")
    lines.append(f"  {BOLD}{fr.file_path}{RESET}")

    for f in fr.findings:
        lines.append(f"    {CYAN}[PIN]{RESET}  line {f.line_number or '?'}  {DIM}{format_path(f.path)}{RESET}")
        lines.append(f"      {f.current}")
        lines.append(f"      {GREEN}→ {f.replacement}{RESET}")

    if mode is Mode.REWRITE and fr.changed:
        status = "written" if fr.written else "not written"
        lines.append(f"    {fr.lines_changed} line(s) rewritten ({status})")

    for e in fr.exclusions:
        target = e.reference or "(whole file)"
        lines.append(f"    {DIM}[SKIP] {target} excluded by pattern '{e.pattern}'{RESET}")

    for w in fr.warnings:
        where = _location(fr.file_path, w.line_number)
        ref = f" {w.reference}:" if w.reference else ""
        lines.append(f"    {YELLOW}[WARN]{RESET} {where}{ref} {w.message} ({w.kind.value})")
    return lines


def report_console(result: RunResult, file_path: str = "") -> str:
    """
    Format a run result as a colored console report.

    Args:
        result: The engine's RunResult.
        file_path: Optional label for the report header.

    Returns:
        The formatted report string (also prints it).
    """
    stats = result.statistics
    lines = []

    # Header
    title = "Action Pinning Report" if result.mode is Mode.REPORT else "Action Pinning"
    if result.dry_run:
        title += " (dry run)"
    lines.append("")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append(f"{BOLD}  {title}{RESET}")
    if file_path:
        lines.append(f"  Path: {file_path}")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append("")

    # Summary counts
    lines.append(f"  Files scanned:      {stats.files_scanned}")
    lines.append(f"  Actions found:      {stats.sites_discovered}")
    lines.append(f"  Eligible to pin:    {stats.sites_eligible}")
    lines.append(f"  Resolved to a SHA:  {stats.sites_resolved}")
    if result.mode is Mode.REWRITE:
        lines.append(f"  Files updated:      {stats.files_changed}")
        lines.append(f"  Actions pinned:     {stats.actions_pinned}")
        if stats.files_failed:
            lines.append(f"  Files failed:       {stats.files_failed}")
    lines.append("")
    lines.append(f"  {'-' * 56}")

    for fr in result.files:
        lines.extend(_file_section(fr, result.mode))

    lines.append("")
    if not result.findings:
        lines.append(f"  ✅ All actions are already SHA-pinned!")
    elif result.mode is Mode.REPORT:
        lines.append(f"  Found {BOLD}{len(result.findings)}{RESET} action(s) that can be pinned.")
    elif result.dry_run:
        changed = result.changed_files
        lines.append(f"  {len(changed)} file(s) would be updated.")
    else:
        lines.append(f"  🎉 Pinned {stats.actions_pinned} action(s) in {stats.files_changed} file(s).")

    lines.append("")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append("")

    report = "\n".join(lines)
    print(report)
    return report
