"""Resilient paginated harvesting engine and the modes built on it."""

from __future__ import annotations

from .config import HarvestConfig
from .errors import HarvestConfigError, PageRetryExhaustedError
from .export import REPORT_HEADER, write_report
from .filters import (
    is_too_heated,
    stamp_issue,
    stamp_repository,
    stamped_for,
    too_heated_for,
)
from .observability import (
    ErrorCategory,
    HarvestEventLogger,
    HarvestEventType,
    HarvestRunContext,
    categorize_error,
)
from .ratelimit import MinimumIntervalGate, NoDelay, RateLimiter
from .retry import RetryPolicy, is_retryable
from .sampler import ID_SPACE, SeenIds, next_unseen_id
from .service import DiscoverResult, EnrichResult, ExportResult, HarvestService
from .walker import PageQuery, PageWalker
from .window import (
    ActivityWindow,
    ExportRow,
    WindowAggregator,
    WindowCounts,
    activity_window,
)

__all__ = [
    "ID_SPACE",
    "REPORT_HEADER",
    "ActivityWindow",
    "DiscoverResult",
    "EnrichResult",
    "ErrorCategory",
    "ExportResult",
    "ExportRow",
    "HarvestConfig",
    "HarvestConfigError",
    "HarvestEventLogger",
    "HarvestEventType",
    "HarvestRunContext",
    "HarvestService",
    "MinimumIntervalGate",
    "NoDelay",
    "PageQuery",
    "PageRetryExhaustedError",
    "PageWalker",
    "RateLimiter",
    "RetryPolicy",
    "SeenIds",
    "WindowAggregator",
    "WindowCounts",
    "activity_window",
    "categorize_error",
    "is_retryable",
    "is_too_heated",
    "next_unseen_id",
    "stamp_issue",
    "stamp_repository",
    "stamped_for",
    "too_heated_for",
    "write_report",
]
