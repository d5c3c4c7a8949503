"""Generic page walker for GitHub list endpoints.

Repository listings, issue listings, comment listings and commit listings all
follow the same protocol: request ``page=1, 2, ...`` with a fixed page size
until an empty JSON array comes back or a page ceiling is reached. The walker
owns that loop, the retry policy for unreliable pages and the spacing between
requests. Callers describe the resource with a :class:`PageQuery`.
"""

from __future__ import annotations

import asyncio
import dataclasses
import itertools
import typing as typ

from lockwatch.logging import get_logger, log_debug, log_warning

from .errors import PageRetryExhaustedError
from .observability import HarvestEventLogger
from .ratelimit import NoDelay, RateLimiter
from .retry import RetryPolicy, is_retryable

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import random

    from lockwatch.github.client import GitHubPageSource

    from .ratelimit import Sleep

logger = get_logger(__name__)

DEFAULT_MAX_PAGES = 50
DEFAULT_PER_PAGE = 100


@dataclasses.dataclass(frozen=True, slots=True)
class PageQuery[T]:
    """Description of one paginated resource walk.

    Attributes
    ----------
    url
        Endpoint URL without pagination parameters.
    item_type
        Struct type each array element decodes into.
    params
        Resource filters sent with every page, e.g. ``state=closed``.
    max_pages
        Page ceiling; ``None`` walks until an empty page.
    per_page
        Page size requested from the API.
    transform
        Applied to every decoded item before it is kept. Returning ``None``
        drops the item. Stamping parent ids happens here so the result set
        deduplicates stamped values.

    """

    url: str
    item_type: type[T]
    params: typ.Mapping[str, str | int] = dataclasses.field(default_factory=dict)
    max_pages: int | None = DEFAULT_MAX_PAGES
    per_page: int = DEFAULT_PER_PAGE
    transform: cabc.Callable[[T], T | None] | None = None

    def page_params(self, page: int) -> dict[str, str | int]:
        """Return the query parameters for ``page``."""
        return {**self.params, "page": page, "per_page": self.per_page}

    def page_numbers(self) -> typ.Iterable[int]:
        """Return the 1-based page numbers this walk may request."""
        if self.max_pages is None:
            return itertools.count(1)
        return range(1, self.max_pages + 1)


class PageWalker:
    """Walk paginated resources with bounded retries and request spacing."""

    def __init__(  # noqa: PLR0913
        self,
        source: GitHubPageSource,
        *,
        retry: RetryPolicy | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: Sleep = asyncio.sleep,
        event_logger: HarvestEventLogger | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Bind the walker to a page source and its pacing collaborators."""
        self._source = source
        self._retry = retry or RetryPolicy()
        self._rate_limiter = rate_limiter or NoDelay()
        self._sleep = sleep
        self._event_logger = event_logger or HarvestEventLogger()
        self._rng = rng

    async def iter_pages[T](self, query: PageQuery[T]) -> cabc.AsyncIterator[list[T]]:
        """Yield each non-empty decoded page, stopping at the first empty one."""
        for page in query.page_numbers():
            items = await self._fetch_page(query, page)
            if not items:
                log_debug(logger, "End of %s reached at page %d", query.url, page)
                return
            yield items

    async def walk[T](self, query: PageQuery[T]) -> set[T]:
        """Return the deduplicated set of accepted items across all pages.

        Raises
        ------
        PageRetryExhaustedError
            When a page runs out of retries. Items accepted from the pages
            before it travel on the error as ``partial``.

        """
        accepted: set[T] = set()
        try:
            async for items in self.iter_pages(query):
                if query.transform is None:
                    accepted.update(items)
                    continue
                for item in items:
                    kept = query.transform(item)
                    if kept is not None:
                        accepted.add(kept)
        except PageRetryExhaustedError as exc:
            exc.partial = frozenset(accepted)
            raise
        return accepted

    async def count[T](self, query: PageQuery[T]) -> int:
        """Return the number of items across all pages, without deduplication.

        A count that fills every allowed page is logged as possibly capped,
        since the ceiling stopped the walk before an empty page did.
        """
        total = 0
        pages = 0
        async for items in self.iter_pages(query):
            total += len(items)
            pages += 1
        if query.max_pages is not None and pages == query.max_pages:
            log_warning(
                logger,
                "Count for %s hit the %d page ceiling; %d items may be an undercount",
                query.url,
                query.max_pages,
                total,
            )
        return total

    async def _fetch_page[T](self, query: PageQuery[T], page: int) -> list[T]:
        """Fetch one page, retrying transient failures on the same page number."""
        params = query.page_params(page)
        attempts = self._retry.max_attempts
        for attempt in range(1, attempts + 1):
            await self._rate_limiter.acquire()
            log_debug(
                logger, "Requesting %s page=%d attempt=%d", query.url, page, attempt
            )
            try:
                return await self._source.get_page(
                    query.url, params=params, item_type=query.item_type
                )
            except Exception as exc:
                if not is_retryable(exc):
                    raise
                if attempt == attempts:
                    self._event_logger.log_page_exhausted(query.url, page, attempts)
                    raise PageRetryExhaustedError(
                        url=query.url, page=page, attempts=attempts
                    ) from exc
                delay = self._retry.delay_for(attempt, rng=self._rng)
                self._event_logger.log_page_retry(query.url, page, attempt, exc, delay)
                await self._sleep(delay)
        # range() is never empty because RetryPolicy enforces max_attempts >= 1.
        raise AssertionError  # pragma: no cover
