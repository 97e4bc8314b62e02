"""
Minimal GitHub REST client for the two lookups the resolver needs:
listing a repository's tags and fetching a branch by name.

A 404 is a normal "not found" answer and returns None. Anything else that
goes wrong (network error, 5xx, rate limiting, unexpected payload) raises
GitHubAPIError so the caller can treat it as a transient failure.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from sha_sentry.errors import GitHubAPIError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_S = 15.0
USER_AGENT = "sha-sentry"


@dataclass(frozen=True)
class Tag:
    name: str
    commit_sha: Optional[str]


@dataclass(frozen=True)
class Branch:
    name: str
    commit_sha: Optional[str]


def _commit_sha(item: dict[str, Any]) -> Optional[str]:
    commit = item.get("commit")
    if isinstance(commit, dict) and isinstance(commit.get("sha"), str):
        return commit["sha"]
    return None


class GitHubClient:
    """Synchronous GitHub API client. Use as a context manager to close the connection pool."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            follow_redirects=True,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Optional[Any]:
        """GET a JSON payload; None on 404."""
        t0 = time.monotonic()
        try:
            resp = self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.debug("GET %s failed: %s", path, e)
            raise GitHubAPIError(f"request to {path} failed: {e}") from e

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.debug("GET %s -> %d in %.0fms", path, resp.status_code, elapsed_ms)

        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            detail = resp.text[:200]
            if resp.status_code in (403, 429) and resp.headers.get("x-ratelimit-remaining") == "0":
                detail = "API rate limit exceeded"
            raise GitHubAPIError(
                f"GitHub API error {resp.status_code} for {path}: {detail}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise GitHubAPIError(f"invalid JSON from {path}: {e}", status_code=resp.status_code) from e

    def list_tags(self, owner: str, repo: str, per_page: int = 100) -> Optional[list[Tag]]:
        """Return up to `per_page` most recent tags, or None if the repository does not exist."""
        data = self._get(f"/repos/{quote(owner)}/{quote(repo)}/tags", params={"per_page": per_page})
        if data is None:
            return None
        if not isinstance(data, list):
            raise GitHubAPIError(f"unexpected tags payload for {owner}/{repo}")
        return [
            Tag(name=item["name"], commit_sha=_commit_sha(item))
            for item in data
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        ]

    def get_branch(self, owner: str, repo: str, branch: str) -> Optional[Branch]:
        """Return the named branch, or None if it (or the repository) does not exist."""
        data = self._get(f"/repos/{quote(owner)}/{quote(repo)}/branches/{quote(branch, safe='')}")
        if data is None:
            return None
        if not isinstance(data, dict):
            raise GitHubAPIError(f"unexpected branch payload for {owner}/{repo}@{branch}")
        return Branch(name=str(data.get("name", branch)), commit_sha=_commit_sha(data))
