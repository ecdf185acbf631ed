"""User endpoints: signup, login and listings."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_app_settings, get_async_session, get_cache
from core.cache import Cache
from core.config import Settings
from core.responses import success_response
from schemas.user import UserCreate, UserLogin
from services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/signup", status_code=201)
async def signup(
    data: UserCreate,
    db: AsyncSession = Depends(get_async_session),
    cache: Cache = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Register a new user and return the user with an access token."""
    result = await user_service.create_user(
        db, cache, settings, data.name, data.email, data.password,
    )
    return success_response("User created successfully", result, status_code=201)


@router.post("/login")
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Log in with email and password."""
    result = await user_service.login(db, settings, data.email, data.password)
    return success_response("User logged in successfully", result)


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_async_session),
    cache: Cache = Depends(get_cache),
) -> JSONResponse:
    """List all users."""
    users = await user_service.list_users(db, cache)
    return success_response("Users retrieved successfully", users)


@router.get("/top-users-posts-comments")
async def top_users_posts_comments(
    db: AsyncSession = Depends(get_async_session),
) -> JSONResponse:
    """Top users by post count with the latest comments on their posts."""
    users = await user_service.top_users_with_latest_comments(db)
    return success_response(
        "Top users with most posts and latest comments retrieved successfully", users,
    )


@router.get("/top-users-posts-comments-optimized")
async def top_users_posts_comments_optimized(
    db: AsyncSession = Depends(get_async_session),
) -> JSONResponse:
    """Optimized variant of the top users report."""
    users = await user_service.top_users_with_latest_comments_optimized(db)
    return success_response(
        "Top users with most posts and latest comments retrieved successfully "
        "optimized version",
        users,
    )
