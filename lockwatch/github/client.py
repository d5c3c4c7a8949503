"""GitHub REST client used by the page walker."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx
import msgspec

from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubDecodeError,
    GitHubTransportError,
)

_HTTP_ERROR_STATUS_THRESHOLD = 400

type QueryParams = typ.Mapping[str, str | int]


class GitHubPageSource(typ.Protocol):
    """Interface for fetching one decoded page of a list endpoint."""

    async def get_page[T](
        self, url: str, *, params: QueryParams, item_type: type[T]
    ) -> list[T]:
        """Return the decoded items of a single page."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    base_url: str = "https://api.github.com"
    user_agent: str = "lockwatch/0.1"
    api_version: str = "2022-11-28"
    timeout_s: float = 30.0

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration using the ``GITHUB_TOKEN`` env var."""
        token = os.environ.get("GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        return cls(token=token)


def _error_message(response: httpx.Response) -> str | None:
    """Extract GitHub's ``message`` field from an error body, if any."""
    try:
        payload = msgspec.json.decode(response.content)
    except msgspec.DecodeError:
        return None
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str):
            return message
    return None


class GitHubRestClient:
    """GitHub REST implementation of :class:`GitHubPageSource`."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
            "Authorization": f"Bearer {config.token}",
            "X-GitHub-Api-Version": config.api_version,
        }
        self._decoders: dict[type, msgspec.json.Decoder[typ.Any]] = {}

    @property
    def base_url(self) -> str:
        """Return the API root without a trailing slash."""
        return self._config.base_url.rstrip("/")

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def _decoder_for(self, item_type: type) -> msgspec.json.Decoder[typ.Any]:
        decoder = self._decoders.get(item_type)
        if decoder is None:
            decoder = msgspec.json.Decoder(list[item_type])
            self._decoders[item_type] = decoder
        return decoder

    async def get_page[T](
        self, url: str, *, params: QueryParams, item_type: type[T]
    ) -> list[T]:
        """GET one page and decode it as a JSON array of ``item_type``.

        Raises
        ------
        GitHubTransportError
            When the request fails at the connection or timeout level.
        GitHubAPIError
            When GitHub answers with a 4xx or 5xx status.
        GitHubDecodeError
            When the body is not a JSON array of the expected shape.

        """
        try:
            response = await self._client.get(
                url, params=dict(params), headers=self._headers
            )
        except httpx.TransportError as exc:
            raise GitHubTransportError.for_request(url, exc) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(
                response.status_code,
                url=str(response.url),
                message=_error_message(response),
            )

        try:
            return self._decoder_for(item_type).decode(response.content)
        except msgspec.DecodeError as exc:
            raise GitHubDecodeError.for_payload(
                str(response.url), response.content, exc
            ) from exc
