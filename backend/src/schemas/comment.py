"""Pydantic schemas for comment endpoints."""
from datetime import datetime

from pydantic import BaseModel, Field

from schemas.base import CamelModel


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    content: str = Field(min_length=1)


class CommentResponse(CamelModel):
    """Schema for comment responses."""

    id: int
    post_id: int
    user_id: int | None
    content: str
    created_at: datetime
