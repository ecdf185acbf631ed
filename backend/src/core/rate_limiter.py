"""Redis-based sliding window rate limiter keyed by client address."""
import logging
import time
import uuid
from dataclasses import dataclass

from core.config import Settings
from core.redis import get_redis_client

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration: max requests within a window."""

    max_requests: int
    window_seconds: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimitConfig":
        """Build the limiter policy from application settings."""
        return cls(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )


@dataclass
class RateLimitResult:
    """Result of a rate limit check with all info needed for headers."""

    allowed: bool
    limit: int  # Max requests in current window
    remaining: int  # Requests remaining in current window
    reset: int  # Unix timestamp when window resets
    retry_after: int  # Seconds until retry allowed (0 if allowed)

    @property
    def headers(self) -> dict[str, str]:
        """X-RateLimit-* headers (plus Retry-After when denied)."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class RedisRateLimiter:
    """Redis-based rate limiter using a sliding window per client."""

    def __init__(self, config: RateLimitConfig) -> None:
        self.config = config

    def _permissive(self) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self.config.max_requests,
            remaining=self.config.max_requests,
            reset=0,
            retry_after=0,
        )

    async def check(self, client_id: str) -> RateLimitResult:
        """
        Check if a request from `client_id` is allowed.

        Falls back to allowing requests if Redis is unavailable.
        """
        redis_client = get_redis_client()
        if (
            redis_client is None
            or not redis_client.is_connected
            or redis_client.sliding_window_sha is None
        ):
            # Redis unavailable - fail open
            logger.warning("redis_unavailable", extra={"operation": "rate_limit"})
            return self._permissive()

        now = int(time.time())
        key = f"rate:{client_id}"
        result = await redis_client.evalsha(
            redis_client.sliding_window_sha,
            1,  # number of keys
            key,
            now,
            self.config.window_seconds,
            self.config.max_requests,
            str(uuid.uuid4()),  # unique request ID
        )
        if result is None:
            return self._permissive()

        allowed, remaining, retry_after = (int(v) for v in result)
        rate_result = RateLimitResult(
            allowed=bool(allowed),
            limit=self.config.max_requests,
            remaining=max(0, remaining),
            reset=now + self.config.window_seconds,
            retry_after=max(0, retry_after) if not allowed else 0,
        )
        if not rate_result.allowed:
            logger.warning(
                "rate_limit_exceeded",
                extra={"client": client_id, "retry_after": rate_result.retry_after},
            )
        return rate_result
