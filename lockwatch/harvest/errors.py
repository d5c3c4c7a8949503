"""Harvest engine error types."""

from __future__ import annotations

import typing as typ


class PageRetryExhaustedError(RuntimeError):
    """Raised when a page keeps failing after the whole retry budget.

    ``partial`` holds the items a set walk had accepted from earlier pages
    before this one gave up. It is empty for counting walks and when the
    first page failed.
    """

    def __init__(
        self,
        *,
        url: str,
        page: int,
        attempts: int,
        partial: frozenset[typ.Any] = frozenset(),
    ) -> None:
        """Record which page of which resource gave up."""
        self.url = url
        self.page = page
        self.attempts = attempts
        self.partial = partial
        super().__init__(f"page {page} of {url} failed after {attempts} attempts")


class HarvestConfigError(ValueError):
    """Raised when harvest configuration values are invalid."""

    @classmethod
    def not_an_integer(cls, name: str, raw: str) -> HarvestConfigError:
        """Return an error for a non-numeric integer setting."""
        return cls(f"{name} must be an integer, got: {raw!r}")

    @classmethod
    def not_a_number(cls, name: str, raw: str) -> HarvestConfigError:
        """Return an error for a non-numeric float setting."""
        return cls(f"{name} must be a number, got: {raw!r}")

    @classmethod
    def out_of_range(cls, name: str, value: float, minimum: float) -> HarvestConfigError:
        """Return an error for a value below its allowed minimum."""
        return cls(f"{name} must be >= {minimum}, got: {value}")
