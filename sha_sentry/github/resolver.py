"""
SHA resolver: turns owner/repo@ref into the commit the ref points to now.

Tags are checked before branches, since tags are the usual release
mechanism: a tag named exactly `ref` wins, then a tag named `v<ref>` (so
`@1.2.3` finds the `v1.2.3` tag). Only then is a branch named `ref` tried.

API failures never raise out of resolve(); they come back as
Unresolved(TRANSIENT_API_FAILURE) so one bad lookup does not stop the run.
"""

import logging
from typing import Optional, Protocol

from sha_sentry.errors import GitHubAPIError
from sha_sentry.github.client import Branch, Tag
from sha_sentry.models import ResolutionOutcome, Resolved, Unresolved, UnresolvedReason

logger = logging.getLogger(__name__)

TAGS_PER_PAGE = 100


class HostingAPI(Protocol):
    def list_tags(self, owner: str, repo: str, per_page: int = TAGS_PER_PAGE) -> Optional[list[Tag]]: ...

    def get_branch(self, owner: str, repo: str, branch: str) -> Optional[Branch]: ...


def _match_tag(tags: list[Tag], ref: str) -> Optional[Tag]:
    for tag in tags:
        if tag.name == ref:
            return tag
    for tag in tags:
        if tag.name == f"v{ref}":
            return tag
    return None


class ShaResolver:
    """
    Resolves refs through a hosting API client.

    Outcomes are memoized per (owner, repo, ref) for the lifetime of the
    instance, which is one run.
    """

    def __init__(self, api: HostingAPI):
        self.api = api
        self._cache: dict[tuple[str, str, str], ResolutionOutcome] = {}

    def resolve(self, namespace: str, name: str, ref: str) -> ResolutionOutcome:
        key = (namespace, name, ref)
        if key in self._cache:
            logger.debug("Cache hit for %s/%s@%s", namespace, name, ref)
            return self._cache[key]
        outcome = self._resolve(namespace, name, ref)
        self._cache[key] = outcome
        return outcome

    def _resolve(self, namespace: str, name: str, ref: str) -> ResolutionOutcome:
        slug = f"{namespace}/{name}"
        try:
            tags = self.api.list_tags(namespace, name, per_page=TAGS_PER_PAGE)
            tag = _match_tag(tags or [], ref)
            if tag is not None:
                if not tag.commit_sha:
                    return Unresolved(
                        UnresolvedReason.AMBIGUOUS_OR_MISSING,
                        f"tag '{tag.name}' of {slug} has no commit SHA",
                    )
                logger.debug("Resolved %s@%s via tag '%s' -> %s", slug, ref, tag.name, tag.commit_sha)
                return Resolved(tag.commit_sha, source=f"tag:{tag.name}")

            branch = self.api.get_branch(namespace, name, ref)
            if branch is not None:
                if not branch.commit_sha:
                    return Unresolved(
                        UnresolvedReason.AMBIGUOUS_OR_MISSING,
                        f"branch '{ref}' of {slug} has no commit SHA",
                    )
                logger.debug("Resolved %s@%s via branch -> %s", slug, ref, branch.commit_sha)
                return Resolved(branch.commit_sha, source=f"branch:{ref}")
        except GitHubAPIError as e:
            logger.debug("API failure resolving %s@%s: %s", slug, ref, e)
            return Unresolved(UnresolvedReason.TRANSIENT_API_FAILURE, str(e))

        if tags is None:
            return Unresolved(UnresolvedReason.NOT_FOUND, f"repository {slug} not found")
        return Unresolved(UnresolvedReason.NOT_FOUND, f"reference '{ref}' not found in {slug}")
