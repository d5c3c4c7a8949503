"""Builders for GitHub REST payloads and a scripted page source."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

API = "https://api.github.test"

type ScriptedPage = cabc.Sequence[object] | BaseException


def repository_payload(repo_id: int, name: str = "reef") -> dict[str, typ.Any]:
    """Return a repository listing entry as GitHub serialises it."""
    base = f"{API}/repos/octo/{name}"
    return {
        "id": repo_id,
        "name": name,
        "full_name": f"octo/{name}",
        "forks_url": f"{base}/forks",
        "stargazers_url": f"{base}/stargazers",
        "commits_url": f"{base}/commits{{/sha}}",
        "issues_url": f"{base}/issues{{/number}}",
    }


def issue_payload(  # noqa: PLR0913
    issue_id: int,
    *,
    repo_name: str = "reef",
    locked: bool = True,
    lock_reason: str | None = "too heated",
    state: str = "closed",
    created_at: str = "2023-05-15T00:00:00Z",
) -> dict[str, typ.Any]:
    """Return an issue listing entry as GitHub serialises it."""
    return {
        "id": issue_id,
        "number": issue_id % 1000,
        "title": f"Issue {issue_id}",
        "created_at": created_at,
        "comments_url": f"{API}/repos/octo/{repo_name}/issues/{issue_id}/comments",
        "locked": locked,
        "active_lock_reason": lock_reason,
        "state": state,
        "user": {"login": "octocat"},
    }


def comment_payload(
    comment_id: int,
    *,
    body: str | None = "This is fine.",
    created_at: str = "2023-05-15T00:00:00Z",
) -> dict[str, typ.Any]:
    """Return an issue comment as GitHub serialises it."""
    return {
        "id": comment_id,
        "body": body,
        "created_at": created_at,
        "user": {"login": "octocat"},
    }


def commit_payloads(count: int, *, offset: int = 0) -> list[dict[str, typ.Any]]:
    """Return ``count`` commit listing entries with distinct SHAs."""
    return [{"sha": f"{offset + index:040x}"} for index in range(count)]


class FakePageSource:
    """Page source serving scripted pages per URL in call order.

    Each scripted entry is either a sequence of JSON-like items, converted to
    the requested struct type, or an exception raised for that call. URLs
    with no remaining entries answer with an empty page.
    """

    def __init__(
        self, pages: cabc.Mapping[str, cabc.Sequence[ScriptedPage]] | None = None
    ) -> None:
        """Copy the script so tests can reuse their fixtures."""
        self._pages: dict[str, list[ScriptedPage]] = {
            url: list(responses) for url, responses in (pages or {}).items()
        }
        self.calls: list[tuple[str, dict[str, str | int]]] = []

    def add(self, url: str, *responses: ScriptedPage) -> None:
        """Append scripted responses for ``url``."""
        self._pages.setdefault(url, []).extend(responses)

    def calls_for(self, url: str) -> list[dict[str, str | int]]:
        """Return the params of every call made to ``url``."""
        return [params for called, params in self.calls if called == url]

    async def get_page[T](
        self,
        url: str,
        *,
        params: cabc.Mapping[str, str | int],
        item_type: type[T],
    ) -> list[T]:
        """Record the call and serve the next scripted response."""
        self.calls.append((url, dict(params)))
        queue = self._pages.get(url)
        if not queue:
            return []
        response = queue.pop(0)
        if isinstance(response, BaseException):
            raise response
        return [
            item if isinstance(item, item_type) else msgspec.convert(item, item_type)
            for item in response
        ]


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self) -> None:
        """Start with no recorded delays."""
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        """Record ``delay`` without waiting."""
        self.delays.append(delay)
