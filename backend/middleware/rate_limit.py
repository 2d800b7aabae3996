"""
In-memory rate limiting for public endpoints.

Order submission gets a tight budget (10 per 15 minutes per IP by default);
login and the availability checks share a looser one. Limits come from
settings and are read on every request, so tests and deployments can tune
them without re-importing routes.

Sliding-window counter per (IP, bucket). Per-process only: with several
workers each keeps its own counters.
"""
import time
import logging
from collections import defaultdict
from typing import Callable

from fastapi import Request

from config import settings
from domain.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Simple in-memory sliding-window rate limiter.

    Tracks request timestamps per key.
    """

    def __init__(self):
        # {key: [timestamp1, timestamp2, ...]}
        self._requests: dict[str, list[float]] = defaultdict(list)

    def _cleanup(self, key: str, window_seconds: int):
        """Remove expired timestamps from the window."""
        cutoff = time.time() - window_seconds
        self._requests[key] = [ts for ts in self._requests[key] if ts > cutoff]

    def check(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """
        Record a request and report whether it is allowed.

        Returns:
            True if allowed, False if rate-limited (rejected requests are not recorded)
        """
        self._cleanup(key, window_seconds)

        if len(self._requests[key]) >= max_requests:
            return False

        self._requests[key].append(time.time())
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        """Get the number of remaining requests in the current window."""
        self._cleanup(key, window_seconds)
        return max(0, max_requests - len(self._requests[key]))

    def reset(self):
        self._requests.clear()


# Global rate limiter instance
_limiter = RateLimiter()


def reset_rate_limits() -> None:
    """Forget all recorded requests (used by tests)."""
    _limiter.reset()


def rate_limit(bucket: str, limits: Callable[[], tuple[int, int]]):
    """
    FastAPI dependency factory for rate limiting.

    Usage:
        @router.post("/orders")
        async def submit(_rate=Depends(rate_limit("orders", order_limits))):
            ...

    Args:
        bucket: Name shared by every route that draws from the same budget
        limits: Returns (max_requests, window_seconds); called per request
    """
    async def _check_rate_limit(request: Request):
        max_requests, window_seconds = limits()
        client_ip = request.client.host if request.client else "unknown"
        key = f"{client_ip}:{bucket}"

        if not _limiter.check(key, max_requests, window_seconds):
            logger.warning(
                f"Rate limit exceeded: {client_ip} on {bucket} "
                f"({max_requests}/{window_seconds}s)"
            )
            raise RateLimitError(
                f"Too many requests. Maximum {max_requests} requests "
                f"per {window_seconds // 60 or 1} minute(s). Try again later.",
                headers={
                    "Retry-After": str(window_seconds),
                    "X-RateLimit-Limit": str(max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check_rate_limit


def order_limits() -> tuple[int, int]:
    return settings.order_rate_limit, settings.order_rate_window_seconds


def api_limits() -> tuple[int, int]:
    return settings.api_rate_limit, settings.api_rate_window_seconds
