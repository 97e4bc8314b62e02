"""Shared fixtures for all tests."""

import os
import shutil
from typing import Optional

import pytest

from sha_sentry.errors import GitHubAPIError
from sha_sentry.github import Branch, ShaResolver, Tag


FIXTURES_ROOT = os.path.join(os.path.dirname(__file__), "fixtures")
WORKFLOWS_DIR = os.path.join(FIXTURES_ROOT, ".github/workflows")

SHA_CHECKOUT = "b4ffde65f46336ab88eb53be808477a3936bae11"
SHA_SETUP_PYTHON = "0a5c61591373683505ea898e09a3ea4f39ef2b9c"
SHA_DEPLOY = "1111111111111111111111111111111111111111"
SHA_RELEASE = "c062e08bd532815e2082a85e87e3ef29c3e6d191"
SHA_SETUP_NODE = "60edb5dd545a775178f52524783378180af0d1f8"


class FakeGitHub:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(
        self,
        tags: Optional[dict[str, dict[str, Optional[str]]]] = None,
        branches: Optional[dict[str, dict[str, Optional[str]]]] = None,
        failing: tuple[str, ...] = (),
    ):
        self.tags = tags or {}
        self.branches = branches or {}
        self.failing = set(failing)
        self.calls: list[tuple[str, str, str]] = []

    def _known(self, slug: str) -> bool:
        return slug in self.tags or slug in self.branches

    def list_tags(self, owner: str, repo: str, per_page: int = 100) -> Optional[list[Tag]]:
        slug = f"{owner}/{repo}"
        self.calls.append(("tags", slug, str(per_page)))
        if slug in self.failing:
            raise GitHubAPIError(f"GitHub API error 502 for {slug}", status_code=502)
        if not self._known(slug):
            return None
        return [Tag(name=name, commit_sha=sha) for name, sha in self.tags.get(slug, {}).items()]

    def get_branch(self, owner: str, repo: str, branch: str) -> Optional[Branch]:
        slug = f"{owner}/{repo}"
        self.calls.append(("branch", slug, branch))
        if slug in self.failing:
            raise GitHubAPIError(f"GitHub API error 502 for {slug}", status_code=502)
        sha = self.branches.get(slug, {}).get(branch, "missing")
        if sha == "missing":
            return None
        return Branch(name=branch, commit_sha=sha)


@pytest.fixture
def fake_github():
    """Hosting API knowing every action used in the fixture files."""
    return FakeGitHub(
        tags={
            "actions/checkout": {"v4.1.1": SHA_CHECKOUT, "v4": SHA_CHECKOUT},
            "actions/setup-python": {"v5": SHA_SETUP_PYTHON},
            "softprops/action-gh-release": {"v1.2.3": SHA_RELEASE},
            "actions/setup-node": {"v4": SHA_SETUP_NODE},
        },
        branches={
            "my-org/deploy-action": {"main": SHA_DEPLOY},
        },
    )


@pytest.fixture
def resolver(fake_github):
    return ShaResolver(fake_github)


@pytest.fixture
def fixtures_root():
    """Path to the fixture repository root."""
    return FIXTURES_ROOT


@pytest.fixture
def workflows_dir():
    """Path to the fixtures workflow directory."""
    return WORKFLOWS_DIR


@pytest.fixture
def ci_workflow_path():
    return os.path.join(WORKFLOWS_DIR, "ci.yml")


@pytest.fixture
def repo_copy(tmp_path):
    """A writable copy of the fixture repository."""
    dest = tmp_path / "repo"
    shutil.copytree(FIXTURES_ROOT, dest)
    return dest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep CI environment variables from leaking into tests."""
    for name in ("EXCLUDE_PATTERNS", "DRY_RUN", "GITHUB_OUTPUT", "GITHUB_API_URL", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
