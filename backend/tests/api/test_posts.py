"""Tests for the post and comment endpoints."""
from collections.abc import Callable

import pytest
from httpx import AsyncClient

POSTS_URL = "/api/v1/posts"


@pytest.fixture
async def user_headers(
    client: AsyncClient,
    auth_headers: Callable[[int], dict[str, str]],
) -> dict[str, str]:
    """Sign up a user and return its Authorization header."""
    response = await client.post(
        "/api/v1/users/signup",
        json={"name": "Alice", "email": "alice@example.com", "password": "secret1"},
    )
    return auth_headers(response.json()["data"]["user"]["id"])


@pytest.mark.parametrize(
    ("method", "url"),
    [
        ("GET", POSTS_URL),
        ("POST", POSTS_URL),
        ("POST", f"{POSTS_URL}/1/comments"),
    ],
)
async def test__missing_token__returns_401(
    client: AsyncClient, method: str, url: str,
) -> None:
    response = await client.request(method, url, json={})

    assert response.status_code == 401
    body = response.json()
    assert body["errorType"] == "AuthenticationError"
    assert body["message"] == "Access token is missing or malformed"


async def test__invalid_token__returns_401(client: AsyncClient) -> None:
    response = await client.get(POSTS_URL, headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


async def test__token_for_deleted_user__returns_404(
    client: AsyncClient,
    auth_headers: Callable[[int], dict[str, str]],
) -> None:
    response = await client.get(POSTS_URL, headers=auth_headers(999))

    assert response.status_code == 404
    assert response.json()["message"] == "User with ID 999 does not exist"


async def test__list_posts__empty(client: AsyncClient, user_headers: dict[str, str]) -> None:
    first = await client.get(POSTS_URL, headers=user_headers)
    second = await client.get(POSTS_URL, headers=user_headers)

    assert first.status_code == second.status_code == 200
    assert first.json()["data"] == second.json()["data"] == []


async def test__create_post__then_listed(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    await client.get(POSTS_URL, headers=user_headers)

    created = await client.post(
        POSTS_URL, json={"title": "Hello", "content": "World"}, headers=user_headers,
    )
    listed = await client.get(POSTS_URL, headers=user_headers)

    assert created.status_code == 201
    post = created.json()["data"]
    assert created.json()["message"] == "Post created successfully"
    assert post["title"] == "Hello"
    assert {"id", "userId", "createdAt", "updatedAt"} <= post.keys()
    assert [p["id"] for p in listed.json()["data"]] == [post["id"]]


async def test__create_post__blank_title_returns_400(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    response = await client.post(
        POSTS_URL, json={"title": "  ", "content": "World"}, headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Title and content are required"


async def test__create_post__missing_field_returns_400(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    response = await client.post(POSTS_URL, json={"title": "Hello"}, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "content"


async def test__add_comment__returns_comment(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    post = await client.post(
        POSTS_URL, json={"title": "Hello", "content": "World"}, headers=user_headers,
    )
    post_id = post.json()["data"]["id"]

    response = await client.post(
        f"{POSTS_URL}/{post_id}/comments", json={"content": "Nice"}, headers=user_headers,
    )

    assert response.status_code == 201
    comment = response.json()["data"]
    assert response.json()["message"] == "Comment added successfully"
    assert comment["content"] == "Nice"
    assert comment["postId"] == post_id


async def test__add_comment__missing_post_returns_404(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    response = await client.post(
        f"{POSTS_URL}/999/comments", json={"content": "Nice"}, headers=user_headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Post with ID 999 does not exist"


async def test__add_comment__non_numeric_post_id_returns_400(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    response = await client.post(
        f"{POSTS_URL}/abc/comments", json={"content": "Nice"}, headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["errorType"] == "ValidationError"


async def test__add_comment__empty_content_returns_400(
    client: AsyncClient, user_headers: dict[str, str],
) -> None:
    response = await client.post(
        f"{POSTS_URL}/1/comments", json={"content": ""}, headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "content"
