"""Pydantic schemas for post endpoints."""
from datetime import datetime

from pydantic import BaseModel

from schemas.base import CamelModel


class PostCreate(BaseModel):
    """Schema for creating a post. Emptiness is checked by the post service."""

    title: str
    content: str


class PostResponse(CamelModel):
    """Schema for post responses."""

    id: int
    user_id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
