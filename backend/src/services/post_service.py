"""Service layer for posts, with cache-aside reads of a user's post list."""
import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import Cache, CacheKeys, CacheState, entity_key
from core.errors import AppError, ErrorKind
from repositories import post_repository, user_repository
from schemas.post import PostResponse

logger = logging.getLogger(__name__)


def user_posts_key(user_id: int) -> str:
    """Cache key holding a user's post list."""
    return entity_key(CacheKeys.FETCH_USER_POSTS, user_id)


async def list_user_posts(
    db: AsyncSession,
    cache: Cache,
    user_id: int,
) -> list[PostResponse]:
    """
    List a user's posts.

    A cached list (including a cached empty list) is returned without
    touching the database. On a miss the user's existence is checked, the
    posts are loaded and the result is cached.

    Raises:
        AppError: NOT_FOUND (404) if the user does not exist.
    """
    key = user_posts_key(user_id)
    cached = await cache.lookup(key)
    if cached.state is CacheState.EMPTY:
        return []
    if cached.state is CacheState.HIT:
        try:
            return [PostResponse.model_validate(p) for p in cached.value]
        except (ValidationError, TypeError) as e:
            logger.warning("Ignoring malformed cached posts for %s: %s", key, e)

    user = await user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise AppError(ErrorKind.NOT_FOUND, f"User with ID {user_id} does not exist")

    return await _refresh_user_posts(db, cache, user_id)


async def create_post(
    db: AsyncSession,
    cache: Cache,
    user_id: int,
    title: str,
    content: str,
) -> PostResponse:
    """
    Create a post and repopulate the author's cached post list.

    Raises:
        AppError: VALIDATION (400) if title or content is empty,
            NOT_FOUND (404) if the user does not exist.
    """
    if not title or not title.strip() or not content or not content.strip():
        raise AppError(ErrorKind.VALIDATION, "Title and content are required")

    user = await user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise AppError(ErrorKind.NOT_FOUND, f"User with ID {user_id} does not exist")

    post = await post_repository.create_post(db, user_id, title, content)
    if post is None:
        raise AppError(ErrorKind.SERVER, "Failed to create post")

    await _refresh_user_posts(db, cache, user_id)
    return PostResponse.model_validate(post)


async def _refresh_user_posts(
    db: AsyncSession,
    cache: Cache,
    user_id: int,
) -> list[PostResponse]:
    """Load a user's posts from the database and write them to the cache."""
    posts = [
        PostResponse.model_validate(p)
        for p in await post_repository.get_user_posts(db, user_id)
    ]
    await cache.store(user_posts_key(user_id), posts)
    return posts
