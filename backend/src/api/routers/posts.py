"""Post and comment endpoints. All require a bearer token."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_cache, get_current_user_id
from core.cache import Cache
from core.responses import success_response
from schemas.comment import CommentCreate
from schemas.post import PostCreate
from services import comment_service, post_service

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("")
async def list_posts(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
    cache: Cache = Depends(get_cache),
) -> JSONResponse:
    """List the authenticated user's posts."""
    posts = await post_service.list_user_posts(db, cache, user_id)
    return success_response("User posts retrieved successfully", posts)


@router.post("", status_code=201)
async def create_post(
    data: PostCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
    cache: Cache = Depends(get_cache),
) -> JSONResponse:
    """Create a post for the authenticated user."""
    post = await post_service.create_post(db, cache, user_id, data.title, data.content)
    return success_response("Post created successfully", post, status_code=201)


@router.post("/{post_id}/comments", status_code=201)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
) -> JSONResponse:
    """Comment on a post as the authenticated user."""
    comment = await comment_service.add_comment(db, post_id, user_id, data.content)
    return success_response("Comment added successfully", comment, status_code=201)
