"""FastAPI dependencies for injection."""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.cache import Cache
from core.config import Settings
from core.errors import AppError, ErrorKind
from core.redis import get_redis_client
from core.security import decode_access_token
from db.session import get_async_session

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_cache(settings: Settings = Depends(get_app_settings)) -> Cache:
    """Cache accessor over the shared Redis client."""
    return Cache(get_redis_client(), default_ttl=settings.redis_expiration)


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> int:
    """
    Resolve the authenticated user id from the bearer token.

    Stores the id in request.state for logging. Raises a 401 AppError if the
    token is missing, malformed, badly signed or expired.
    """
    if credentials is None or not credentials.credentials:
        raise AppError(ErrorKind.AUTHENTICATION, "Access token is missing or malformed")

    user_id = decode_access_token(credentials.credentials, settings)
    request.state.user_id = user_id
    return user_id


__all__ = [
    "get_app_settings",
    "get_async_session",
    "get_cache",
    "get_current_user_id",
]
