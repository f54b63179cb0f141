"""
Per-Origin Rate Limiting

Fixed-window counter: each origin gets `max_requests` per window of
`window_seconds`. The window opens on the first request and resets once
its full duration has elapsed. A rejected request still counts against
the window.

Counters live in a RateLimitStorageInterface. Production deployments
use the Redis store so every handler process shares one counter per
origin; the in-memory store is for tests and single-process runs.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from ledger_service.errors import RateLimitedError
from ledger_service.services.storage import RateLimitStorageInterface


logger = structlog.get_logger("ledger_service.ratelimit")


@dataclass(frozen=True)
class Admitted:
    """Request admitted; `remaining` is what is left in this window."""

    origin: str
    count: int
    remaining: int
    window_start: float


class RateLimiter:
    """Admits or rejects requests per origin address."""

    def __init__(
        self,
        storage: RateLimitStorageInterface,
        max_requests: int = 100,
        window_seconds: float = 60,
        clock: Optional[Callable[[], float]] = None,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self._storage = storage
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.time

    def admit(self, origin: str, now: Optional[float] = None) -> Admitted:
        """
        Count this request and decide.

        Raises:
            RateLimitedError: origin is over its ceiling for the current window
        """
        if now is None:
            now = self._clock()

        window_start, count = self._storage.hit(origin, now, self.window_seconds)

        if count > self.max_requests:
            retry_after = max(1, math.ceil(window_start + self.window_seconds - now))
            logger.warning(
                "rate_limit_exceeded",
                origin=origin,
                count=count,
                retry_after=retry_after,
            )
            raise RateLimitedError("Rate limit exceeded", retry_after=retry_after)

        return Admitted(
            origin=origin,
            count=count,
            remaining=self.max_requests - count,
            window_start=window_start,
        )
