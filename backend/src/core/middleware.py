"""Request pipeline middlewares: rate limiting and IP allow-listing."""
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from core.config import Settings
from core.errors import ErrorKind
from core.rate_limiter import RateLimitConfig, RedisRateLimiter
from core.responses import error_response

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Client address: first X-Forwarded-For entry, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients exceeding the request budget with 429; add rate limit headers."""

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.limiter = RedisRateLimiter(RateLimitConfig.from_settings(settings))

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        result = await self.limiter.check(get_client_ip(request))
        if not result.allowed:
            return error_response(
                status_code=ErrorKind.RATE_LIMITED.status_code,
                message="Too many requests, please try again later.",
                error_type=ErrorKind.RATE_LIMITED.error_type,
                headers=result.headers,
            )

        response = await call_next(request)
        # reset == 0 means Redis was unavailable and nothing was counted
        if result.reset:
            response.headers.update(result.headers)
        return response


class IPAllowListMiddleware(BaseHTTPMiddleware):
    """Reject requests whose client address is not allow-listed."""

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.allowed_ips = frozenset(settings.whitelisted_ips)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = get_client_ip(request)
        if client_ip not in self.allowed_ips:
            logger.warning(
                "ip_access_denied",
                extra={"client": client_ip, "path": request.url.path},
            )
            return JSONResponse(
                status_code=ErrorKind.FORBIDDEN.status_code,
                content={
                    "success": False,
                    "message": "Access denied: Your IP is not whitelisted.",
                },
            )
        return await call_next(request)
