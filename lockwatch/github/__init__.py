"""GitHub REST client primitives and decoded payload models."""

from __future__ import annotations

from .client import GitHubPageSource, GitHubRestClient, GitHubRestConfig
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubDecodeError,
    GitHubTransportError,
)
from .models import Comment, CommitRef, Issue, Repository, commits_endpoint

__all__ = [
    "Comment",
    "CommitRef",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubDecodeError",
    "GitHubPageSource",
    "GitHubRestClient",
    "GitHubRestConfig",
    "GitHubTransportError",
    "Issue",
    "Repository",
    "commits_endpoint",
]
