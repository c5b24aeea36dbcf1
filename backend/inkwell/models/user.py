"""
Inkwell Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table.
Who:   Used by UserService, the session sign-in route and the seed command.

Table Design Rationale:
    - String UUID primary key: opaque to clients, generated in Python so the
      same model works on PostgreSQL and SQLite.
    - email UNIQUE: the database constraint is the authoritative guard; the
      service's pre-check only produces a friendlier error.
    - email and name are TEXT: no length limit on either.
    - posts relationship: cascade-delete. The foreign key carries
      ON DELETE CASCADE and the relationship uses passive_deletes, so deleting
      a user is a single DELETE and the database removes the posts.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.database import Base, UTCDateTime

if TYPE_CHECKING:
    from inkwell.models.post import Post


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered author.

    Lifecycle:
        1. Created by upsert-by-email (seed command or session sign-in)
        2. email/name updated in place; updated_at refreshed by onupdate
        3. Hard-deleted together with all of their posts
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    email: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        index=True,
    )

    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

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

    # Newest first, matching every place posts are shown for a user
    posts: Mapped[List["Post"]] = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Post.created_at)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
