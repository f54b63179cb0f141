"""Rate limiting package."""

from ledger_service.ratelimit.limiter import Admitted, RateLimiter

__all__ = ["Admitted", "RateLimiter"]
