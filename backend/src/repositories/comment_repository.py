"""Data access for comments."""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AppError, ErrorKind
from models.comment import Comment


async def create_comment(
    db: AsyncSession,
    post_id: int,
    user_id: int | None,
    content: str,
) -> Comment:
    """Insert a comment and commit. `user_id` is None for anonymous comments."""
    comment = Comment(post_id=post_id, user_id=user_id, content=content)
    db.add(comment)
    try:
        await db.commit()
        await db.refresh(comment)
    except SQLAlchemyError as e:
        await db.rollback()
        raise AppError(
            ErrorKind.DATABASE, f"Failed to create comment for post ID {post_id}",
        ) from e
    return comment
