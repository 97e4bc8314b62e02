"""
Data model shared by the walker, classifier, resolver, engine and reporters.

Everything here is owned by a single run; nothing is persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from sha_sentry.errors import ErrorKind

# A structural path from the document root: mapping keys and sequence indices.
StructuralPath = tuple[Union[str, int], ...]


class Mode(Enum):
    REPORT = "report"
    REWRITE = "rewrite"


def format_path(path: StructuralPath) -> str:
    """Render a structural path as e.g. `jobs.build.steps[0].uses`."""
    out = ""
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else part
    return out


@dataclass(frozen=True)
class ActionReference:
    """A parsed `uses:` target."""
    namespace: str      # e.g. "actions"
    name: str           # e.g. "checkout"
    ref: str            # e.g. "v4", "main" or a 40-char SHA
    raw_text: str       # e.g. "actions/checkout@v4"

    @property
    def slug(self) -> str:
        return f"{self.namespace}/{self.name}"

    def pinned_to(self, commit_id: str) -> str:
        return f"{self.slug}@{commit_id}"


class Classification(Enum):
    ALREADY_PINNED = "already-pinned"
    LOCAL_PATH = "local-path"
    CONTAINER_IMAGE = "container-image"
    EXCLUDED_BY_PATTERN = "excluded-by-pattern"
    ELIGIBLE = "eligible"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ClassificationResult:
    kind: Classification
    reference: Optional[ActionReference] = None
    pattern: Optional[str] = None   # set for EXCLUDED_BY_PATTERN
    detail: str = ""

    @property
    def eligible(self) -> bool:
        return self.kind is Classification.ELIGIBLE


class UnresolvedReason(Enum):
    NOT_FOUND = "not-found"
    AMBIGUOUS_OR_MISSING = "ambiguous-or-missing"
    TRANSIENT_API_FAILURE = "transient-api-failure"


@dataclass(frozen=True)
class Resolved:
    commit_id: str
    source: str = ""    # "tag:<name>" or "branch:<name>"


@dataclass(frozen=True)
class Unresolved:
    reason: UnresolvedReason
    message: str = ""


ResolutionOutcome = Union[Resolved, Unresolved]


@dataclass(frozen=True)
class InvocationSite:
    """A `uses:` entry found in a document tree."""
    path: StructuralPath
    raw_reference: str


@dataclass
class Finding:
    """A reference that can be pinned, with its recommended replacement."""
    file_path: str
    path: StructuralPath
    line_number: Optional[int]
    current: str            # the reference as written
    replacement: str        # "owner/repo@<sha>  # owner/repo@<ref>"
    commit_id: str


@dataclass
class Exclusion:
    """A file or reference skipped because of an exclusion pattern."""
    file_path: str
    pattern: str
    reference: Optional[str] = None     # None when the whole file matched
    path: StructuralPath = ()
    line_number: Optional[int] = None


@dataclass
class SiteWarning:
    """A degraded site or file: left unchanged, run continues."""
    file_path: str
    kind: ErrorKind
    message: str
    reference: Optional[str] = None
    line_number: Optional[int] = None


@dataclass
class RunStatistics:
    """Monotonic counters for one run."""
    files_scanned: int = 0
    sites_discovered: int = 0
    sites_eligible: int = 0
    sites_resolved: int = 0
    files_changed: int = 0
    actions_pinned: int = 0
    files_failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "files_scanned": self.files_scanned,
            "sites_discovered": self.sites_discovered,
            "sites_eligible": self.sites_eligible,
            "sites_resolved": self.sites_resolved,
            "files_changed": self.files_changed,
            "actions_pinned": self.actions_pinned,
            "files_failed": self.files_failed,
        }


@dataclass
class FileResult:
    """Everything the engine learned about one file."""
    file_path: str
    findings: list[Finding] = field(default_factory=list)
    exclusions: list[Exclusion] = field(default_factory=list)
    warnings: list[SiteWarning] = field(default_factory=list)
    content: Optional[str] = None   # rewritten text (rewrite mode)
    lines_changed: int = 0
    written: bool = False

    @property
    def changed(self) -> bool:
        return self.lines_changed > 0


@dataclass
class RunResult:
    mode: Mode
    dry_run: bool
    files: list[FileResult]
    statistics: RunStatistics

    @property
    def findings(self) -> list[Finding]:
        return [f for fr in self.files for f in fr.findings]

    @property
    def exclusions(self) -> list[Exclusion]:
        return [e for fr in self.files for e in fr.exclusions]

    @property
    def warnings(self) -> list[SiteWarning]:
        return [w for fr in self.files for w in fr.warnings]

    @property
    def changed_files(self) -> list[FileResult]:
        return [fr for fr in self.files if fr.changed]

    @property
    def ok(self) -> bool:
        """False if any file failed to persist."""
        return self.statistics.files_failed == 0
