"""User model for registered authors."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.comment import Comment
    from models.post import Post


class User(Base):
    """User model - email is the login identifier and must be unique."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(150), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255), comment="bcrypt hash")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(),
    )

    posts: Mapped[list["Post"]] = relationship(
        back_populates="user", passive_deletes=True,
    )
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="user", passive_deletes=True,
    )
