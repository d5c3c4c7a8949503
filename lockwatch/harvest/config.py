"""Runtime configuration for harvest runs.

Usage
-----
Create a configuration with defaults:

>>> config = HarvestConfig()
>>> config.page_delay_s
5.0

Or load from environment variables:

>>> import os
>>> os.environ["LOCKWATCH_MAX_PAGES"] = "10"
>>> HarvestConfig.from_env().max_pages
10
>>> del os.environ["LOCKWATCH_MAX_PAGES"]

"""

from __future__ import annotations

import dataclasses as dc
import os

from .errors import HarvestConfigError
from .retry import RetryPolicy


def _read_int(env_var: str, default: int, *, minimum: int) -> int:
    """Read an integer env var, falling back to a default when unset."""
    raw = os.environ.get(env_var, "")
    if not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise HarvestConfigError.not_an_integer(env_var, raw) from exc
    if value < minimum:
        raise HarvestConfigError.out_of_range(env_var, value, minimum)
    return value


def _read_float(env_var: str, default: float, *, minimum: float) -> float:
    """Read a float env var, falling back to a default when unset."""
    raw = os.environ.get(env_var, "")
    if not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise HarvestConfigError.not_a_number(env_var, raw) from exc
    if value < minimum:
        raise HarvestConfigError.out_of_range(env_var, value, minimum)
    return value


@dc.dataclass(frozen=True, slots=True)
class HarvestConfig:
    """Knobs shared by the page walker, aggregator and harvest modes.

    Attributes
    ----------
    page_delay_s
        Minimum spacing between consecutive API requests. Default 5 seconds.
    max_pages
        Page ceiling for issue, comment and commit walks. Default 50.
    listing_max_pages
        Page ceiling for a repository listing probe. The listing paginates by
        ``since`` rather than ``page``, so one page per probe. Default 1.
    per_page
        Page size requested from the API. Default 100 (GitHub's maximum).
    retry_attempts
        Requests made for one page before giving up. Default 5.
    retry_base_delay_s, retry_max_delay_s
        Exponential backoff start and cap. Defaults 1 and 60 seconds.
    window_days
        Half-width of the commit activity window. Default 30 days.

    """

    page_delay_s: float = 5.0
    max_pages: int = 50
    listing_max_pages: int = 1
    per_page: int = 100
    retry_attempts: int = 5
    retry_base_delay_s: float = 1.0
    retry_max_delay_s: float = 60.0
    window_days: int = 30

    @property
    def retry_policy(self) -> RetryPolicy:
        """Return the page retry policy described by this configuration."""
        return RetryPolicy(
            max_attempts=self.retry_attempts,
            base_delay_s=self.retry_base_delay_s,
            max_delay_s=self.retry_max_delay_s,
        )

    @classmethod
    def from_env(cls) -> HarvestConfig:
        """Create configuration from environment variables.

        Reads ``LOCKWATCH_PAGE_DELAY_SECONDS``, ``LOCKWATCH_MAX_PAGES``,
        ``LOCKWATCH_PER_PAGE``, ``LOCKWATCH_RETRY_ATTEMPTS``,
        ``LOCKWATCH_RETRY_BASE_DELAY_SECONDS``,
        ``LOCKWATCH_RETRY_MAX_DELAY_SECONDS`` and ``LOCKWATCH_WINDOW_DAYS``.
        Unset or blank variables keep their defaults.

        Raises
        ------
        HarvestConfigError
            If a variable is not numeric or below its minimum.

        """
        defaults = cls()
        return cls(
            page_delay_s=_read_float(
                "LOCKWATCH_PAGE_DELAY_SECONDS", defaults.page_delay_s, minimum=0.0
            ),
            max_pages=_read_int("LOCKWATCH_MAX_PAGES", defaults.max_pages, minimum=1),
            per_page=_read_int("LOCKWATCH_PER_PAGE", defaults.per_page, minimum=1),
            retry_attempts=_read_int(
                "LOCKWATCH_RETRY_ATTEMPTS", defaults.retry_attempts, minimum=1
            ),
            retry_base_delay_s=_read_float(
                "LOCKWATCH_RETRY_BASE_DELAY_SECONDS",
                defaults.retry_base_delay_s,
                minimum=0.0,
            ),
            retry_max_delay_s=_read_float(
                "LOCKWATCH_RETRY_MAX_DELAY_SECONDS",
                defaults.retry_max_delay_s,
                minimum=0.0,
            ),
            window_days=_read_int(
                "LOCKWATCH_WINDOW_DAYS", defaults.window_days, minimum=1
            ),
        )
