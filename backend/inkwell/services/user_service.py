"""
Inkwell Backend — User Service (Business Logic)
=================================================

What:  Read, update, delete and upsert users.
Who:   Called by the /users and /auth/session route handlers and the seed command.

Email uniqueness:
    update_user() checks whether another user already holds the new email
    before writing. That check is advisory: two concurrent updates can both
    pass it. The UNIQUE constraint on users.email is the real guard, and the
    IntegrityError it raises on flush is reported as the same ConflictError.

Deletion policy:
    Deleting a user cascade-deletes their posts. The foreign key declares
    ON DELETE CASCADE, so the service issues a single DELETE for the user and
    never enumerates posts itself.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.exceptions import (
    ConflictError,
    DatabaseError,
    InkwellError,
    NotFoundError,
    ValidationError,
)
from inkwell.models.user import User
from inkwell.schemas.common import MessageResponse
from inkwell.schemas.user import (
    UserDetailResponse,
    UserPostItem,
    UserResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class UserService:
    """Business logic layer for user operations."""

    async def _get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user(self, db: AsyncSession, user_id: str) -> UserDetailResponse:
        """
        User projection plus their posts (reduced projection, newest first).

        Raises:
            NotFoundError: no user with this id (→ 404)
        """
        try:
            result = await db.execute(
                select(User).options(selectinload(User.posts)).where(User.id == user_id)
            )
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            return UserDetailResponse(
                id=user.id,
                email=user.email,
                name=user.name,
                created_at=user.created_at,
                updated_at=user.updated_at,
                posts=[
                    UserPostItem(
                        id=post.id,
                        title=post.title,
                        content=post.content,
                        published=post.published,
                        created_at=post.created_at,
                        updated_at=post.updated_at,
                    )
                    for post in user.posts
                ],
            )

        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch user", context={"user_id": user_id})

    async def get_user_summary(self, db: AsyncSession, user_id: str) -> UserResponse:
        """User projection without posts (used for the signed-in user)."""
        try:
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)
            return user_to_response(user)
        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch user", context={"user_id": user_id})

    async def update_user(
        self,
        db: AsyncSession,
        user_id: str,
        payload: UserUpdate,
    ) -> UserResponse:
        """
        Updates email and/or name.

        email is applied when non-empty; name whenever the key was sent
        (an explicit null clears it).

        Raises:
            NotFoundError: no user with this id
            ConflictError: another user already has the requested email
        """
        try:
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            if payload.email and payload.email != user.email:
                holder = await self._get_by_email(db, payload.email)
                if holder is not None:
                    raise ConflictError(
                        message="User with this email already exists",
                        context={"user_id": user_id, "holder_id": holder.id},
                    )
                user.email = payload.email

            if "name" in payload.model_fields_set:
                user.name = payload.name

            if db.is_modified(user):
                user.updated_at = datetime.now(timezone.utc)
                await db.flush()
                logger.info("User %s updated", user_id)

            return user_to_response(user)

        except InkwellError:
            raise
        except IntegrityError as e:
            # Lost a race with a concurrent update that took the same email
            logger.warning("Unique constraint rejected update of user %s: %s", user_id, e.orig)
            raise ConflictError(
                message="User with this email already exists",
                context={"user_id": user_id},
            )
        except Exception as e:
            logger.error("Database error updating user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update user", context={"user_id": user_id})

    async def delete_user(self, db: AsyncSession, user_id: str) -> MessageResponse:
        """
        Deletes a user; the database cascades the delete to their posts.

        Raises:
            NotFoundError: no user with this id
        """
        try:
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            await db.delete(user)
            await db.flush()
            logger.info("User %s deleted (posts cascaded)", user_id)
            return MessageResponse(message="User deleted successfully")

        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete user", context={"user_id": user_id})

    async def upsert_by_email(
        self,
        db: AsyncSession,
        email: str,
        name: Optional[str] = None,
    ) -> User:
        """
        Returns the user holding `email`, creating it if needed.

        An existing user is returned untouched (name is only used on create),
        which makes repeated calls idempotent.
        """
        email = (email or "").strip()
        if not email:
            raise ValidationError(message="Email is required", field="email")

        try:
            user = await self._get_by_email(db, email)
            if user is not None:
                return user

            user = User(email=email, name=name)
            # A duplicate insert rolls back to this savepoint only
            async with db.begin_nested():
                db.add(user)
                await db.flush()
            logger.info("User %s created for %s", user.id, email)
            return user

        except InkwellError:
            raise
        except IntegrityError:
            # Created concurrently by another request; the row now exists
            user = await self._get_by_email(db, email)
            if user is None:
                raise DatabaseError(message="Failed to create user", context={"email": email})
            return user
        except Exception as e:
            logger.error("Database error upserting user %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(message="Failed to create user", context={"email": email})


user_service = UserService()
