"""Unit tests for the GitHub REST page client."""

from __future__ import annotations

import httpx
import msgspec
import pytest

from lockwatch.github import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubDecodeError,
    GitHubRestClient,
    GitHubRestConfig,
    GitHubTransportError,
    Issue,
    Repository,
)
from tests.helpers.github_payloads import issue_payload, repository_payload

LISTING_URL = "https://api.github.test/repositories"


def _client(handler: httpx.MockTransport) -> GitHubRestClient:
    http_client = httpx.AsyncClient(transport=handler)
    return GitHubRestClient(
        GitHubRestConfig(token="secret", base_url="https://api.github.test/"),
        http_client=http_client,
    )


@pytest.mark.asyncio
async def test_get_page_sends_headers_and_params() -> None:
    """Requests carry auth, API headers and the page parameters."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[repository_payload(5)])

    client = _client(httpx.MockTransport(handler))
    try:
        items = await client.get_page(
            LISTING_URL,
            params={"since": 4, "page": 1, "per_page": 100},
            item_type=Repository,
        )
    finally:
        await client.aclose()

    assert [item.id for item in items] == [5]
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"
    assert request.headers["User-Agent"] == "lockwatch/0.1"
    assert dict(request.url.params) == {"since": "4", "page": "1", "per_page": "100"}


@pytest.mark.asyncio
async def test_get_page_ignores_unknown_fields() -> None:
    """Extra payload fields do not break decoding."""

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[issue_payload(1)])

    client = _client(httpx.MockTransport(handler))
    items = await client.get_page(LISTING_URL, params={}, item_type=Issue)

    assert items[0].active_lock_reason == "too heated"
    assert items[0].repository_id is None


@pytest.mark.asyncio
async def test_http_error_carries_status_and_message() -> None:
    """Error responses raise GitHubAPIError with GitHub's message."""

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    client = _client(httpx.MockTransport(handler))

    with pytest.raises(GitHubAPIError) as excinfo:
        await client.get_page(LISTING_URL, params={}, item_type=Repository)

    assert excinfo.value.status_code == 404
    assert "Not Found" in str(excinfo.value)
    assert not excinfo.value.is_transient


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "body"),
    [
        (502, b"Bad Gateway"),
        (429, b"{}"),
        (403, b'{"message": "You have exceeded a secondary rate limit."}'),
    ],
    ids=["server-error", "throttled", "secondary-rate-limit"],
)
async def test_transient_statuses(status: int, body: bytes) -> None:
    """Server errors and rate limits are flagged transient."""

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=body)

    client = _client(httpx.MockTransport(handler))

    with pytest.raises(GitHubAPIError) as excinfo:
        await client.get_page(LISTING_URL, params={}, item_type=Repository)

    assert excinfo.value.is_transient


@pytest.mark.asyncio
async def test_shape_mismatch_raises_decode_error() -> None:
    """A body that is not an array of the item type raises GitHubDecodeError."""
    body = b'{"message": "this is not a list"}' + b" " * 400

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    client = _client(httpx.MockTransport(handler))

    with pytest.raises(GitHubDecodeError) as excinfo:
        await client.get_page(LISTING_URL, params={}, item_type=Repository)

    assert excinfo.value.excerpt.startswith('{"message"')
    assert len(excinfo.value.excerpt) == 200
    assert isinstance(excinfo.value.__cause__, msgspec.ValidationError)


@pytest.mark.asyncio
async def test_invalid_json_raises_decode_error() -> None:
    """A truncated body raises GitHubDecodeError."""

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'[{"id": 1,')

    client = _client(httpx.MockTransport(handler))

    with pytest.raises(GitHubDecodeError):
        await client.get_page(LISTING_URL, params={}, item_type=Repository)


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped() -> None:
    """Connection failures surface as GitHubTransportError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(httpx.MockTransport(handler))

    with pytest.raises(GitHubTransportError) as excinfo:
        await client.get_page(LISTING_URL, params={}, item_type=Repository)

    assert excinfo.value.url == LISTING_URL
    assert "ConnectError" in str(excinfo.value)


def test_base_url_drops_trailing_slash() -> None:
    """The API root is exposed without a trailing slash."""
    client = GitHubRestClient(
        GitHubRestConfig(token="secret", base_url="https://api.github.test/")
    )

    assert client.base_url == "https://api.github.test"


def test_empty_token_rejected() -> None:
    """A blank token is a configuration error."""
    with pytest.raises(GitHubConfigError):
        GitHubRestClient(GitHubRestConfig(token="  "))


def test_config_from_env_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing GITHUB_TOKEN raises GitHubConfigError."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    with pytest.raises(GitHubConfigError, match="GITHUB_TOKEN"):
        GitHubRestConfig.from_env()


def test_config_from_env_reads_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """GITHUB_TOKEN is trimmed and used as the bearer token."""
    monkeypatch.setenv("GITHUB_TOKEN", "  abc  ")

    assert GitHubRestConfig.from_env().token == "abc"


def test_template_suffixes_are_stripped() -> None:
    """Issue and commit endpoints drop their URL template suffixes."""
    repository = msgspec.convert(repository_payload(5), Repository)

    assert repository.issues_endpoint == "https://api.github.test/repos/octo/reef/issues"
    assert (
        repository.commits_endpoint == "https://api.github.test/repos/octo/reef/commits"
    )
