"""Observability primitives for harvest runs.

Provides structured logging and error categorisation for page walks and the
three harvest modes. Every event is a single log line prefixed with its event
type so log aggregators can parse it.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from lockwatch.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubDecodeError,
    GitHubTransportError,
)

from lockwatch.logging import get_logger, log_error, log_info, log_warning

from .errors import PageRetryExhaustedError

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)


class HarvestEventType(enum.StrEnum):
    """Structured log event types for harvest observability."""

    RUN_STARTED = "harvest.run.started"
    RUN_COMPLETED = "harvest.run.completed"
    RUN_FAILED = "harvest.run.failed"
    PAGE_RETRY = "harvest.page.retry"
    PAGE_EXHAUSTED = "harvest.page.exhausted"
    ITEM_SKIPPED = "harvest.item.skipped"
    ITEM_TRUNCATED = "harvest.item.truncated"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    RETRY_EXHAUSTED = "retry_exhausted"
    CONFIGURATION = "configuration"
    DATABASE_CONNECTIVITY = "database_connectivity"
    DATA_INTEGRITY = "data_integrity"
    DATABASE_ERROR = "database_error"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class HarvestRunContext:
    """Shared context for a single harvest mode run."""

    mode: str
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (GitHubTransportError, ErrorCategory.TRANSIENT),
    (GitHubDecodeError, ErrorCategory.SCHEMA_DRIFT),
    (PageRetryExhaustedError, ErrorCategory.RETRY_EXHAUSTED),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
    (OperationalError, ErrorCategory.DATABASE_CONNECTIVITY),
    (InterfaceError, ErrorCategory.DATABASE_CONNECTIVITY),
    (IntegrityError, ErrorCategory.DATA_INTEGRITY),
    (SQLAlchemyError, ErrorCategory.DATABASE_ERROR),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorise an exception for alerting purposes."""
    if isinstance(exc, GitHubAPIError):
        if exc.is_transient:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class HarvestEventLogger:
    """Emit structured harvest events via femtologging.

    INFO for run boundaries. WARNING for retries, skipped items and items kept
    with only part of their pages. ERROR for exhausted pages and failed runs.
    """

    def log_run_started(self, context: HarvestRunContext) -> None:
        """Log harvest run start."""
        log_info(
            logger,
            "[%s] mode=%s started_at=%s",
            HarvestEventType.RUN_STARTED,
            context.mode,
            context.started_at.isoformat(),
        )

    def log_run_completed(
        self,
        context: HarvestRunContext,
        duration: dt.timedelta,
        counters: typ.Mapping[str, int],
    ) -> None:
        """Log successful run completion with its counters."""
        rendered = " ".join(f"{key}={value}" for key, value in counters.items())
        log_info(
            logger,
            "[%s] mode=%s duration_seconds=%.3f %s",
            HarvestEventType.RUN_COMPLETED,
            context.mode,
            duration.total_seconds(),
            rendered,
        )

    def log_run_failed(
        self,
        context: HarvestRunContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a failed run with error categorisation."""
        log_error(
            logger,
            "[%s] mode=%s duration_seconds=%.3f error_type=%s "
            "error_category=%s error_message=%s",
            HarvestEventType.RUN_FAILED,
            context.mode,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_page_retry(
        self,
        url: str,
        page: int,
        attempt: int,
        error: BaseException,
        delay_s: float,
    ) -> None:
        """Log a failed page attempt that will be retried."""
        excerpt = error.excerpt if isinstance(error, GitHubDecodeError) else None
        log_warning(
            logger,
            "[%s] url=%s page=%d attempt=%d delay_seconds=%.2f "
            "error_category=%s error_message=%s payload_excerpt=%r",
            HarvestEventType.PAGE_RETRY,
            url,
            page,
            attempt,
            delay_s,
            categorize_error(error),
            str(error),
            excerpt,
        )

    def log_page_exhausted(self, url: str, page: int, attempts: int) -> None:
        """Log a page that failed on every attempt."""
        log_error(
            logger,
            "[%s] url=%s page=%d attempts=%d",
            HarvestEventType.PAGE_EXHAUSTED,
            url,
            page,
            attempts,
        )

    def log_item_skipped(self, kind: str, item: str, error: BaseException) -> None:
        """Log a repository, issue or probe skipped after a recoverable error."""
        log_warning(
            logger,
            "[%s] kind=%s item=%s error_category=%s error_message=%s",
            HarvestEventType.ITEM_SKIPPED,
            kind,
            item,
            categorize_error(error),
            str(error),
        )

    def log_item_truncated(
        self, kind: str, item: str, kept: int, error: BaseException
    ) -> None:
        """Log an item stored with the pages fetched before retries ran out."""
        log_warning(
            logger,
            "[%s] kind=%s item=%s kept=%d error_category=%s error_message=%s",
            HarvestEventType.ITEM_TRUNCATED,
            kind,
            item,
            kept,
            categorize_error(error),
            str(error),
        )
