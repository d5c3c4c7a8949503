"""Harvest modes: discover, enrich-comments and aggregate-and-export.

Each mode is a thin loop over the page walker and the store. Recoverable
failures (a page that exhausted its retries, or a non-transient API error
such as a 404 for a deleted repository) skip the repository, issue or comment
they belong to and are logged. When retries run out after earlier pages of
issues or comments were fetched, those pages are stored and the item is
logged as truncated. Persistence failures propagate and end the run.
"""

from __future__ import annotations

import dataclasses
import random
import typing as typ

from lockwatch.common.time import utcnow
from lockwatch.github.errors import GitHubAPIError
from lockwatch.github.models import Comment, Issue, Repository
from lockwatch.logging import get_logger, log_info

from .config import HarvestConfig
from .errors import PageRetryExhaustedError
from .export import write_report
from .filters import CLOSED, stamped_for, too_heated_for
from .observability import HarvestEventLogger, HarvestRunContext
from .sampler import SeenIds, next_unseen_id
from .walker import PageQuery
from .window import ExportRow, WindowAggregator

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from lockwatch.storage.services import HarvestStore

    from .walker import PageWalker

logger = get_logger(__name__)

_RECOVERABLE = (PageRetryExhaustedError, GitHubAPIError)


@dataclasses.dataclass(frozen=True, slots=True)
class DiscoverResult:
    """Summary of a discover run."""

    iterations: int = 0
    probes_failed: int = 0
    repositories_scanned: int = 0
    repositories_skipped: int = 0
    repositories_truncated: int = 0
    repositories_stored: int = 0
    issues_stored: int = 0


@dataclasses.dataclass(frozen=True, slots=True)
class EnrichResult:
    """Summary of a comment enrichment run."""

    issues_scanned: int = 0
    issues_skipped: int = 0
    issues_truncated: int = 0
    comments_stored: int = 0


@dataclasses.dataclass(frozen=True, slots=True)
class ExportResult:
    """Summary of an aggregate-and-export run."""

    output: Path
    rows_written: int = 0
    comments_skipped: int = 0


class HarvestService:
    """Drive the three harvest modes against one store and one walker."""

    def __init__(  # noqa: PLR0913
        self,
        store: HarvestStore,
        walker: PageWalker,
        *,
        base_url: str = "https://api.github.com",
        config: HarvestConfig | None = None,
        rng: random.Random | None = None,
        event_logger: HarvestEventLogger | None = None,
    ) -> None:
        """Create a service bound to a store, walker and API root."""
        self._store = store
        self._walker = walker
        self._base_url = base_url.rstrip("/")
        self._config = config or HarvestConfig()
        self._rng = rng or random.Random()  # noqa: S311 - sampling, not crypto
        self._event_logger = event_logger or HarvestEventLogger()
        self._seen: SeenIds = set()
        self._aggregator = WindowAggregator(
            walker,
            days=self._config.window_days,
            max_pages=self._config.max_pages,
            per_page=self._config.per_page,
        )

    async def _observed[R](
        self,
        mode: str,
        body: cabc.Awaitable[R],
        counters: cabc.Callable[[R], dict[str, typ.Any]],
    ) -> R:
        """Await ``body`` between run-started and run-completed/failed events."""
        context = HarvestRunContext(mode=mode, started_at=utcnow())
        self._event_logger.log_run_started(context)
        try:
            result = await body
        except BaseException as exc:
            duration = utcnow() - context.started_at
            self._event_logger.log_run_failed(context, exc, duration)
            raise
        self._event_logger.log_run_completed(
            context, utcnow() - context.started_at, counters(result)
        )
        return result

    def _listing_query(self, since: int) -> PageQuery[Repository]:
        return PageQuery(
            url=f"{self._base_url}/repositories",
            item_type=Repository,
            params={"since": since},
            max_pages=self._config.listing_max_pages,
            per_page=self._config.per_page,
        )

    def _issue_query(self, repository: Repository) -> PageQuery[Issue]:
        return PageQuery(
            url=repository.issues_endpoint,
            item_type=Issue,
            params={"state": CLOSED},
            max_pages=self._config.max_pages,
            per_page=self._config.per_page,
            transform=too_heated_for(repository.id),
        )

    def _comment_query(self, issue_id: int, comments_url: str) -> PageQuery[Comment]:
        return PageQuery(
            url=comments_url,
            item_type=Comment,
            max_pages=self._config.max_pages,
            per_page=self._config.per_page,
            transform=stamped_for(issue_id),
        )

    async def _walk_keeping_partial[T](
        self, query: PageQuery[T], kind: str, item: str
    ) -> tuple[set[T], bool]:
        """Walk ``query``, falling back to the pages fetched before retries ran out.

        Returns the items and whether they are partial. Exhaustion on the first
        page leaves nothing to keep and propagates.
        """
        try:
            return await self._walker.walk(query), False
        except PageRetryExhaustedError as exc:
            if not exc.partial:
                raise
            self._event_logger.log_item_truncated(kind, item, len(exc.partial), exc)
            return set(exc.partial), True

    async def discover(self, iterations: int) -> DiscoverResult:
        """Probe ``iterations`` random listing offsets for too-heated issues."""
        return await self._observed(
            "discover", self._discover(iterations), dataclasses.asdict
        )

    async def _discover(self, iterations: int) -> DiscoverResult:
        counts = dict.fromkeys(
            (
                "probes_failed",
                "repositories_scanned",
                "repositories_skipped",
                "repositories_truncated",
                "repositories_stored",
                "issues_stored",
            ),
            0,
        )
        for _ in range(iterations):
            since = next_unseen_id(self._seen, self._rng)
            query = self._listing_query(since)
            log_info(logger, "Searching repositories: %s?since=%d", query.url, since)
            try:
                repositories = await self._walker.walk(query)
            except _RECOVERABLE as exc:
                counts["probes_failed"] += 1
                self._event_logger.log_item_skipped("probe", f"since={since}", exc)
                continue

            for repository in sorted(repositories, key=lambda repo: repo.id):
                counts["repositories_scanned"] += 1
                try:
                    issues, truncated = await self._walk_keeping_partial(
                        self._issue_query(repository), "repository", repository.name
                    )
                except _RECOVERABLE as exc:
                    counts["repositories_skipped"] += 1
                    self._event_logger.log_item_skipped(
                        "repository", repository.name, exc
                    )
                    continue
                if truncated:
                    counts["repositories_truncated"] += 1
                if not issues:
                    continue

                log_info(
                    logger,
                    "Found %d too heated issues in repository %s (id=%d)",
                    len(issues),
                    repository.name,
                    repository.id,
                )
                if await self._store.store_repository(repository):
                    counts["repositories_stored"] += 1
                counts["issues_stored"] += await self._store.store_issues(issues)

        return DiscoverResult(iterations=iterations, **counts)

    async def enrich_comments(self) -> EnrichResult:
        """Fetch and store the comments of every stored issue."""
        return await self._observed(
            "enrich-comments", self._enrich_comments(), dataclasses.asdict
        )

    async def _enrich_comments(self) -> EnrichResult:
        issues = await self._store.list_issues()
        scanned = skipped = truncated = stored = 0
        for issue in issues:
            scanned += 1
            log_info(logger, "Retrieving comments for issue %d", issue.issue_id)
            try:
                comments, partial = await self._walk_keeping_partial(
                    self._comment_query(issue.issue_id, issue.comments_url),
                    "issue",
                    str(issue.issue_id),
                )
            except _RECOVERABLE as exc:
                skipped += 1
                self._event_logger.log_item_skipped("issue", str(issue.issue_id), exc)
                continue
            if partial:
                truncated += 1
            stored += await self._store.store_comments(comments)
        return EnrichResult(
            issues_scanned=scanned,
            issues_skipped=skipped,
            issues_truncated=truncated,
            comments_stored=stored,
        )

    async def aggregate_and_export(self, output: Path) -> ExportResult:
        """Count commits around every toxic comment and write the CSV report."""
        return await self._observed(
            "aggregate-and-export",
            self._aggregate_and_export(output),
            lambda result: {
                "rows_written": result.rows_written,
                "comments_skipped": result.comments_skipped,
            },
        )

    async def _aggregate_and_export(self, output: Path) -> ExportResult:
        targets = await self._store.list_toxic_comment_targets()
        rows: list[ExportRow] = []
        skipped = 0
        for target in targets:
            try:
                rows.append(await self._aggregator.row_for(target))
            except _RECOVERABLE as exc:
                skipped += 1
                self._event_logger.log_item_skipped(
                    "comment", str(target.comment_id), exc
                )
        written = write_report(output, rows)
        log_info(logger, "Wrote %d rows to %s", written, output)
        return ExportResult(
            output=output, rows_written=written, comments_skipped=skipped
        )
