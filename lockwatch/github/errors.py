"""GitHub REST client errors."""

from __future__ import annotations

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_FORBIDDEN = 403
_HTTP_TOO_MANY_REQUESTS = 429
_EXCERPT_LIMIT = 200


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(
        self, message: str, *, status_code: int | None = None, url: str | None = None
    ) -> None:
        """Initialise with a message, optional HTTP status code and URL."""
        self.status_code = status_code
        self.url = url
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, *, url: str, message: str | None = None
    ) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        detail = f": {message}" if message else ""
        return cls(
            f"GitHub REST HTTP {status_code} for {url}{detail}",
            status_code=status_code,
            url=url,
        )

    @property
    def is_transient(self) -> bool:
        """Return True when retrying the same request may succeed.

        Server errors, explicit throttling (429) and secondary rate limits
        (403 carrying a rate-limit message) are transient. Other client
        errors such as 404 or 410 are not.
        """
        if self.status_code is None:
            return False
        if self.status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
            return True
        if self.status_code == _HTTP_TOO_MANY_REQUESTS:
            return True
        return (
            self.status_code == _HTTP_FORBIDDEN and "rate limit" in str(self).lower()
        )


class GitHubTransportError(RuntimeError):
    """Raised when a request fails before an HTTP response arrives."""

    def __init__(self, message: str, *, url: str) -> None:
        """Record the URL that could not be reached."""
        self.url = url
        super().__init__(message)

    @classmethod
    def for_request(cls, url: str, cause: BaseException) -> GitHubTransportError:
        """Return an error wrapping a connection or timeout failure."""
        return cls(
            f"GitHub request to {url} failed: {type(cause).__name__}: {cause}",
            url=url,
        )


class GitHubDecodeError(RuntimeError):
    """Raised when a response body does not match the expected item shape."""

    def __init__(self, message: str, *, url: str, excerpt: str) -> None:
        """Keep a bounded payload excerpt for diagnostics."""
        self.url = url
        self.excerpt = excerpt
        super().__init__(message)

    @classmethod
    def for_payload(
        cls, url: str, payload: bytes, cause: BaseException
    ) -> GitHubDecodeError:
        """Return an error describing a payload that failed to decode."""
        excerpt = payload[:_EXCERPT_LIMIT].decode("utf-8", errors="replace")
        return cls(
            f"GitHub response from {url} could not be decoded: {cause}",
            url=url,
            excerpt=excerpt,
        )


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("GITHUB_TOKEN is required for the GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
