"""Service layer for signup, login and user listings."""
import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.cache import Cache, CacheKeys, CacheState
from core.config import Settings
from core.errors import AppError, ErrorKind
from core.security import create_access_token, hash_password, verify_password
from repositories import user_repository
from schemas.user import AuthResponse, TopUserLatestComment, TopUserSummary, UserResponse

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password so accounts can't be enumerated
INVALID_CREDENTIALS = "Invalid Credentials"


async def create_user(
    db: AsyncSession,
    cache: Cache,
    settings: Settings,
    name: str,
    email: str,
    password: str,
) -> AuthResponse:
    """
    Register a user and issue a token.

    Invalidates the cached user list so the next listing includes the new user.

    Raises:
        AppError: CONFLICT (409) if the email is already registered.
    """
    existing_user = await user_repository.find_user_by_email(db, email)
    if existing_user is not None:
        raise AppError(ErrorKind.CONFLICT, "User already exists with this email address")

    # bcrypt is CPU bound; keep it off the event loop
    hashed_password = await run_in_threadpool(hash_password, password)
    user = await user_repository.create_user(db, name, email, hashed_password)

    token = create_access_token(user.id, settings)
    await cache.invalidate(CacheKeys.FETCH_ALL_USERS)

    return AuthResponse(user=UserResponse.model_validate(user), token=token)


async def login(
    db: AsyncSession,
    settings: Settings,
    email: str,
    password: str,
) -> AuthResponse:
    """
    Authenticate by email and password and issue a token.

    Raises:
        AppError: AUTHENTICATION (400) with the same message whether the email
            is unknown or the password is wrong.
    """
    user = await user_repository.find_user_by_email(db, email)
    if user is None:
        raise AppError(ErrorKind.AUTHENTICATION, INVALID_CREDENTIALS, status_code=400)

    valid_password = await run_in_threadpool(verify_password, password, user.password)
    if not valid_password:
        raise AppError(ErrorKind.AUTHENTICATION, INVALID_CREDENTIALS, status_code=400)

    token = create_access_token(user.id, settings)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


async def list_users(db: AsyncSession, cache: Cache) -> list[UserResponse]:
    """
    List all users (without passwords), served from cache when possible.

    Raises:
        AppError: NOT_FOUND (404) if there are no users.
    """
    cached = await cache.lookup(CacheKeys.FETCH_ALL_USERS)
    if cached.state is CacheState.HIT:
        try:
            return [UserResponse.model_validate(u) for u in cached.value]
        except (ValidationError, TypeError) as e:
            logger.warning(
                "Ignoring malformed cached users for %s: %s", CacheKeys.FETCH_ALL_USERS, e,
            )

    users = [
        UserResponse.model_validate(u) for u in await user_repository.get_all_users(db)
    ]
    if not users:
        raise AppError(ErrorKind.NOT_FOUND, "No users found")

    await cache.store(CacheKeys.FETCH_ALL_USERS, users)
    return users


async def top_users_with_latest_comments(db: AsyncSession) -> list[TopUserLatestComment]:
    """Top users by post count with the latest comment on their posts. Not cached."""
    try:
        rows = await user_repository.get_top_users_with_latest_comments(db)
    except AppError as e:
        raise AppError(
            ErrorKind.SERVER,
            f"Failed to fetch top users with latest comments: {e.message}",
        ) from e
    return [TopUserLatestComment.model_validate(row) for row in rows]


async def top_users_with_latest_comments_optimized(
    db: AsyncSession,
) -> list[TopUserSummary]:
    """Optimized variant: post counts plus each user's latest comment. Not cached."""
    try:
        rows = await user_repository.get_top_users_with_latest_comments_optimized(db)
    except AppError as e:
        raise AppError(
            ErrorKind.SERVER,
            f"Failed to fetch optimized top users with latest comments: {e.message}",
        ) from e
    return [TopUserSummary.model_validate(row) for row in rows]
