"""
Redis Rate-Limit Storage

Shared fixed-window counters for every handler process.

Each origin maps to one key holding the request count. The key is
created with a TTL equal to the window, so Redis itself closes the
window; the window start is recovered from the remaining TTL.
"""

from typing import Optional

import redis
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ledger_service.config import get_settings
from ledger_service.services.storage.interface import (
    RateLimitStorageInterface,
    StorageConnectionError,
)


logger = structlog.get_logger("ledger_service.storage.redis")


class RedisRateLimitStorage(RateLimitStorageInterface):
    """Fixed-window counters kept in Redis (SET NX PX + INCR)."""

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        key_prefix: Optional[str] = None,
    ):
        if client is None:
            client = redis.Redis.from_url(
                get_settings().redis.url,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        if key_prefix is None:
            key_prefix = get_settings().rate_limit.key_prefix
        self._client = client
        self._prefix = key_prefix

    def _key(self, origin: str) -> str:
        return f"{self._prefix}:{origin}"

    @retry(
        retry=retry_if_exception_type(redis.ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _increment(self, key: str, window_ms: int) -> tuple[int, int]:
        pipe = self._client.pipeline(transaction=True)
        pipe.set(key, 0, px=window_ms, nx=True)
        pipe.incr(key)
        pipe.pttl(key)
        _, count, ttl_ms = pipe.execute()
        return int(count), int(ttl_ms)

    def hit(self, key: str, now: float, window_seconds: float) -> tuple[float, int]:
        window_ms = max(1, int(window_seconds * 1000))
        try:
            count, ttl_ms = self._increment(self._key(key), window_ms)
        except redis.RedisError as e:
            logger.error("rate_limit_store_unavailable", error=str(e))
            raise StorageConnectionError(f"Redis unavailable: {e}") from e

        if ttl_ms < 0:
            # Key lost its TTL (evicted and recreated by INCR); treat as fresh
            ttl_ms = window_ms
        window_start = now - (window_ms - ttl_ms) / 1000.0
        return window_start, count
