"""Data access for posts."""
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AppError, ErrorKind
from models.post import Post


async def get_user_posts(db: AsyncSession, user_id: int) -> list[Post]:
    """Fetch all posts owned by a user, oldest first."""
    try:
        result = await db.execute(
            select(Post).where(Post.user_id == user_id).order_by(Post.id),
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        raise AppError(
            ErrorKind.DATABASE, f"Failed to fetch posts for user ID {user_id}",
        ) from e


async def get_post_by_id(db: AsyncSession, post_id: int) -> Post | None:
    """Fetch a post by id, or None."""
    try:
        return await db.get(Post, post_id)
    except SQLAlchemyError as e:
        raise AppError(
            ErrorKind.DATABASE, f"Failed to fetch post by ID {post_id}",
        ) from e


async def create_post(
    db: AsyncSession,
    user_id: int,
    title: str,
    content: str,
) -> Post:
    """Insert a post and commit."""
    post = Post(user_id=user_id, title=title, content=content)
    db.add(post)
    try:
        await db.commit()
        await db.refresh(post)
    except SQLAlchemyError as e:
        await db.rollback()
        raise AppError(
            ErrorKind.DATABASE, f"Failed to create post for user ID {user_id}",
        ) from e
    return post
