"""Pydantic schemas for user endpoints."""
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from schemas.base import CamelModel

MIN_PASSWORD_LENGTH = 6


class UserCreate(BaseModel):
    """Schema for signing up."""

    name: str
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UserLogin(BaseModel):
    """Schema for logging in."""

    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UserResponse(CamelModel):
    """Public user representation (never includes the password hash)."""

    id: int
    name: str
    email: str
    created_at: datetime | None = None


class AuthResponse(CamelModel):
    """Returned by signup and login."""

    user: UserResponse
    token: str


class TopUserLatestComment(CamelModel):
    """Row of the top-users report: a user's post and its latest comment."""

    id: int
    name: str
    title: str | None = None
    content: str | None = None


class TopUserSummary(BaseModel):
    """
    Row of the optimized top-users report.

    Keeps the snake_case column names of the report query on the wire.
    """

    user_id: int
    name: str
    post_count: int
    latest_comment: str | None = None
    latest_comment_date: datetime | None = None
