"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.comment import Comment
from models.post import Post
from models.user import User

__all__ = ["Base", "Comment", "Post", "TimestampMixin", "User"]
