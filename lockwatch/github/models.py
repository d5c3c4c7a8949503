"""Typed payloads decoded from the GitHub REST API.

Structs are frozen so decoded items hash and compare by every field. That is
what the page walker relies on to collapse duplicates inside a run, and why
foreign keys must be stamped before an item enters a result set.
"""

from __future__ import annotations

import msgspec

_ISSUE_NUMBER_TEMPLATE = "{/number}"
_COMMIT_SHA_TEMPLATE = "{/sha}"


def _strip_template(url: str, template: str) -> str:
    """Drop an RFC 6570 expansion suffix such as ``{/number}``."""
    return url.removesuffix(template)


class Repository(msgspec.Struct, frozen=True, kw_only=True):
    """Repository listing entry.

    Attributes
    ----------
    id : int
        Source-assigned identifier, used as the deduplication key.
    name : str
        Short repository name.
    forks_url, stargazers_url : str
        Plain endpoint URLs.
    commits_url, issues_url : str
        URL templates carrying ``{/sha}`` and ``{/number}`` suffixes.

    """

    id: int
    name: str
    forks_url: str
    stargazers_url: str
    commits_url: str
    issues_url: str

    @property
    def issues_endpoint(self) -> str:
        """Return the issue listing URL without its template suffix."""
        return _strip_template(self.issues_url, _ISSUE_NUMBER_TEMPLATE)

    @property
    def commits_endpoint(self) -> str:
        """Return the commit listing URL without its template suffix."""
        return commits_endpoint(self.commits_url)


class Issue(msgspec.Struct, frozen=True, kw_only=True):
    """Issue listing entry; ``repository_id`` is stamped by the harvester."""

    id: int
    title: str
    created_at: str
    comments_url: str
    locked: bool
    state: str
    active_lock_reason: str | None = None
    repository_id: int | None = None


class Comment(msgspec.Struct, frozen=True, kw_only=True):
    """Issue comment; ``issue_id`` is stamped by the harvester."""

    id: int
    created_at: str
    body: str | None = None
    issue_id: int | None = None


class CommitRef(msgspec.Struct, frozen=True, kw_only=True):
    """Commit listing entry. Only counted, never persisted."""

    sha: str


def commits_endpoint(commits_url: str) -> str:
    """Return a commit listing URL from a stored ``commits_url`` template."""
    return _strip_template(commits_url, _COMMIT_SHA_TEMPLATE)
