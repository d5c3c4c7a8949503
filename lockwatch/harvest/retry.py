"""Bounded retry policy for page requests."""

from __future__ import annotations

import dataclasses
import random

from lockwatch.github.errors import (
    GitHubAPIError,
    GitHubDecodeError,
    GitHubTransportError,
)


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential backoff with jitter and a fixed attempt budget.

    Attributes
    ----------
    max_attempts
        Total requests made for one page, including the first. Must be >= 1.
    base_delay_s
        Delay before the first retry; doubled for every further retry.
    max_delay_s
        Upper bound applied before jitter.
    jitter
        Fractional spread applied to each delay (0.25 means +/-25%).

    """

    max_attempts: int = 5
    base_delay_s: float = 1.0
    max_delay_s: float = 60.0
    jitter: float = 0.25

    def __post_init__(self) -> None:
        """Reject budgets that would never issue a request."""
        if self.max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {self.max_attempts}"
            raise ValueError(msg)

    def delay_for(self, attempt: int, *, rng: random.Random | None = None) -> float:
        """Return the pause before retrying after failed ``attempt`` (1-based)."""
        base = min(self.base_delay_s * (2 ** max(attempt - 1, 0)), self.max_delay_s)
        if not self.jitter or base <= 0:
            return base
        source = rng or random
        spread = base * self.jitter
        return max(0.0, base + source.uniform(-spread, spread))


def is_retryable(exc: BaseException) -> bool:
    """Return True for failures that re-requesting the same page may cure."""
    if isinstance(exc, GitHubTransportError | GitHubDecodeError):
        return True
    if isinstance(exc, GitHubAPIError):
        return exc.is_transient
    return False
