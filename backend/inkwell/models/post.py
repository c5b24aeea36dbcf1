"""
Inkwell Backend — Post SQLAlchemy Model
=========================================

What:  ORM model for the `posts` table.
Who:   Used by PostService for CRUD and by UserService for the user detail view.

Table Design Rationale:
    - author_id NOT NULL + FK ON DELETE CASCADE: a post always has exactly one
      existing author and disappears with them.
    - content NOT NULL, defaulting to '': "no content" is the empty string.
    - title is TEXT: no length limit, so any non-empty title is storable.
    - published defaults to False (draft).
    - Index on created_at DESC: every listing is newest first.
    - Index on author_id: author-scoped listing and the cascade delete.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.database import Base, UTCDateTime

if TYPE_CHECKING:
    from inkwell.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by one User.

    author_id is set once at creation; no code path updates it.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    author: Mapped["User"] = relationship("User", back_populates="posts")

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, author_id={self.author_id}, "
            f"published={self.published})>"
        )


# Newest-first listing is the dominant query
Index("idx_posts_created_at", Post.created_at.desc())
