"""Minimum-interval gate between consecutive API requests."""

from __future__ import annotations

import asyncio
import time
import typing as typ

type Sleep = typ.Callable[[float], typ.Awaitable[None]]
type Clock = typ.Callable[[], float]


class RateLimiter(typ.Protocol):
    """Interface awaited before every page request."""

    async def acquire(self) -> None:
        """Wait until the next request may be sent."""
        ...


class MinimumIntervalGate:
    """Space requests at least ``interval_s`` apart.

    The first request passes immediately. Later requests sleep for whatever
    remains of the interval since the previous one was released, so time
    spent decoding and storing counts towards the gap.
    """

    def __init__(
        self,
        interval_s: float,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Create a gate with an injectable clock and sleeper."""
        if interval_s < 0:
            msg = f"interval_s must be >= 0, got {interval_s}"
            raise ValueError(msg)
        self._interval_s = interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_release: float | None = None

    async def acquire(self) -> None:
        """Sleep out the remaining interval, then record the release time."""
        if self._last_release is not None:
            remaining = self._interval_s - (self._clock() - self._last_release)
            if remaining > 0:
                await self._sleep(remaining)
        self._last_release = self._clock()


class NoDelay:
    """Rate limiter that never waits."""

    async def acquire(self) -> None:
        """Return immediately."""
