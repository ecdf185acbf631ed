"""Tests for the comment service."""
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from core.errors import AppError, ErrorKind
from services import comment_service


@pytest.mark.parametrize(
    ("post_id", "user_id", "message"),
    [
        ("abc", 1, "Invalid post ID"),
        (0, 1, "Invalid post ID"),
        (-3, 1, "Invalid post ID"),
        (1, None, "Invalid user ID"),
        (1, True, "Invalid user ID"),
    ],
)
async def test__add_comment__invalid_ids_raise_validation(
    post_id: object, user_id: object, message: str,
) -> None:
    """Ids that are not positive integers are rejected before any query."""
    with patch("repositories.post_repository.get_post_by_id", new_callable=AsyncMock) as get_post:
        with pytest.raises(AppError) as exc_info:
            await comment_service.add_comment(AsyncMock(), post_id, user_id, "Nice")

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert exc_info.value.message == message
    get_post.assert_not_awaited()


async def test__add_comment__missing_post_raises_not_found() -> None:
    with patch(
        "repositories.post_repository.get_post_by_id", new_callable=AsyncMock, return_value=None,
    ):
        with pytest.raises(AppError) as exc_info:
            await comment_service.add_comment(AsyncMock(), 42, 1, "Nice")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.message == "Post with ID 42 does not exist"


async def test__add_comment__missing_user_raises_not_found() -> None:
    with (
        patch(
            "repositories.post_repository.get_post_by_id",
            new_callable=AsyncMock,
            return_value=SimpleNamespace(id=42),
        ),
        patch(
            "repositories.user_repository.get_user_by_id",
            new_callable=AsyncMock,
            return_value=None,
        ),
        patch("repositories.comment_repository.create_comment", new_callable=AsyncMock) as create,
    ):
        with pytest.raises(AppError) as exc_info:
            await comment_service.add_comment(AsyncMock(), 42, 7, "Nice")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.message == "User with ID 7 does not exist"
    create.assert_not_awaited()


async def test__add_comment__returns_created_comment() -> None:
    """The stored comment echoes the submitted content."""
    db = AsyncMock()
    comment = SimpleNamespace(
        id=5, post_id=42, user_id=7, content="Nice", created_at=datetime.now(UTC),
    )
    with (
        patch(
            "repositories.post_repository.get_post_by_id",
            new_callable=AsyncMock,
            return_value=SimpleNamespace(id=42),
        ),
        patch(
            "repositories.user_repository.get_user_by_id",
            new_callable=AsyncMock,
            return_value=SimpleNamespace(id=7),
        ),
        patch(
            "repositories.comment_repository.create_comment",
            new_callable=AsyncMock,
            return_value=comment,
        ) as create,
    ):
        result = await comment_service.add_comment(db, 42, 7, "Nice")

    create.assert_awaited_once_with(db, 42, 7, "Nice")
    assert result.content == "Nice"
    assert result.post_id == 42
    assert result.user_id == 7
