"""Service layer for comments."""
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AppError, ErrorKind
from repositories import comment_repository, post_repository, user_repository
from schemas.comment import CommentResponse


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


async def add_comment(
    db: AsyncSession,
    post_id: int,
    user_id: int,
    content: str,
) -> CommentResponse:
    """
    Add a comment to an existing post on behalf of an existing user.

    Raises:
        AppError: VALIDATION (400) if either id is not a positive integer,
            NOT_FOUND (404) if the post or the user does not exist.
    """
    if not _is_positive_int(post_id):
        raise AppError(ErrorKind.VALIDATION, "Invalid post ID")
    if not _is_positive_int(user_id):
        raise AppError(ErrorKind.VALIDATION, "Invalid user ID")

    post = await post_repository.get_post_by_id(db, post_id)
    if post is None:
        raise AppError(ErrorKind.NOT_FOUND, f"Post with ID {post_id} does not exist")

    user = await user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise AppError(ErrorKind.NOT_FOUND, f"User with ID {user_id} does not exist")

    comment = await comment_repository.create_comment(db, post_id, user_id, content)
    return CommentResponse.model_validate(comment)
