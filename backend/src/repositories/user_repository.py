"""Data access for users, including the top-users reports."""
import logging
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AppError, ErrorKind
from models.user import User

logger = logging.getLogger(__name__)

TOP_USERS_LIMIT = 3

# Each top user's posts joined with the most recent comment on each post,
# ordered by the user's total post count.
TOP_USERS_WITH_LATEST_COMMENTS_SQL = text("""
    SELECT users.id, users.name, posts.title, comments.content
    FROM users
    LEFT JOIN posts ON users.id = posts.user_id
    LEFT JOIN comments ON posts.id = comments.post_id
    WHERE comments.created_at = (
        SELECT MAX(created_at)
        FROM comments
        WHERE post_id = posts.id
    )
    ORDER BY (
        SELECT COUNT(p.id)
        FROM posts p
        WHERE p.user_id = users.id
    ) DESC
    LIMIT :limit
""")

# Aggregate post counts once, then fetch each top user's latest comment
# with a lateral join instead of correlated subqueries per row.
TOP_USERS_WITH_LATEST_COMMENTS_OPTIMIZED_SQL = text("""
    SELECT
        u.id AS user_id,
        u.name,
        tu.post_count,
        c.content AS latest_comment,
        c.created_at AS latest_comment_date
    FROM (
        SELECT p.user_id, COUNT(p.id) AS post_count
        FROM posts p
        GROUP BY p.user_id
        ORDER BY post_count DESC
        LIMIT :limit
    ) tu
    JOIN users u ON u.id = tu.user_id
    LEFT JOIN LATERAL (
        SELECT content, created_at
        FROM comments
        WHERE comments.user_id = u.id
        ORDER BY created_at DESC
        LIMIT 1
    ) c ON true
    ORDER BY tu.post_count DESC
""")


async def get_all_users(db: AsyncSession) -> list[User]:
    """Fetch all users ordered by id."""
    try:
        result = await db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        raise AppError(ErrorKind.DATABASE, "Database error: Could not fetch users") from e


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by id, or None."""
    try:
        return await db.get(User, user_id)
    except SQLAlchemyError as e:
        raise AppError(
            ErrorKind.DATABASE, f"Failed to fetch user with ID {user_id}",
        ) from e


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email, or None."""
    try:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error("Failed to fetch user by email: %s", email)
        raise AppError(
            ErrorKind.DATABASE, "Database error: Could not fetch user by email",
        ) from e


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    hashed_password: str,
) -> User:
    """
    Insert a user and commit.

    Raises:
        AppError: CONFLICT if the email was registered concurrently,
            DATABASE for any other failure.
    """
    user = User(name=name, email=email, password=hashed_password)
    db.add(user)
    try:
        await db.commit()
        await db.refresh(user)
    except IntegrityError as e:
        await db.rollback()
        raise AppError(
            ErrorKind.CONFLICT, "User already exists with this email address",
        ) from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise AppError(ErrorKind.DATABASE, "Failed to create user") from e
    return user


async def get_top_users_with_latest_comments(
    db: AsyncSession,
    limit: int = TOP_USERS_LIMIT,
) -> list[dict[str, Any]]:
    """Top users by post count with the latest comment on each of their posts."""
    try:
        result = await db.execute(TOP_USERS_WITH_LATEST_COMMENTS_SQL, {"limit": limit})
        return [dict(row) for row in result.mappings().all()]
    except SQLAlchemyError as e:
        raise AppError(
            ErrorKind.DATABASE,
            "Database error: Could not fetch top users with latest comments",
        ) from e


async def get_top_users_with_latest_comments_optimized(
    db: AsyncSession,
    limit: int = TOP_USERS_LIMIT,
) -> list[dict[str, Any]]:
    """Top users by post count, each with their own most recent comment."""
    try:
        result = await db.execute(
            TOP_USERS_WITH_LATEST_COMMENTS_OPTIMIZED_SQL, {"limit": limit},
        )
        return [dict(row) for row in result.mappings().all()]
    except SQLAlchemyError as e:
        raise AppError(
            ErrorKind.DATABASE,
            "Database error: Could not fetch top users with latest comments",
        ) from e
