"""
Inkwell Backend — Post Service (Business Logic)
=================================================

What:  List, read, create, update and delete posts, with ownership checks.
Why:   Keeps every rule about posts in one place, independent of HTTP.
How:   Each method receives the AsyncSession for the current unit of work,
       queries through the ORM and returns Pydantic response models.
Who:   Called by the /posts route handlers and by the seed command.

Ordering of checks (every mutating method):
    1. Input shape        → ValidationError   (no storage touched)
    2. Record existence   → NotFoundError
    3. Ownership          → ForbiddenError / AuthenticationError
    4. Write + flush      → DatabaseError on unexpected failure

    Nothing is written until all checks have passed. The session is committed
    (or rolled back) by the caller, not here.

Design Decision:
    PostService is stateless; the database session and the caller's identity
    arrive as arguments on each call, so one instance serves every request.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.exceptions import DatabaseError, InkwellError, NotFoundError, ValidationError
from inkwell.models.post import Post
from inkwell.models.user import User
from inkwell.schemas.common import MessageResponse
from inkwell.schemas.post import (
    AuthorSummary,
    PostCreate,
    PostResponse,
    PostUpdate,
    truncate_content,
)
from inkwell.services.authorization import ensure_owner, resolve_actor

logger = logging.getLogger(__name__)


def _to_response(post: Post, author: User) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        excerpt=truncate_content(post.content),
        published=post.published,
        author_id=post.author_id,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=AuthorSummary(id=author.id, email=author.email, name=author.name),
    )


class PostService:
    """
    Business logic layer for post operations.

    Error Handling Strategy:
        Application exceptions (InkwellError subclasses) propagate unchanged.
        Anything else raised while talking to the database is logged with its
        traceback and wrapped in DatabaseError, which the API reports as a
        generic 500.
    """

    async def _load(self, db: AsyncSession, post_id: str) -> Post:
        result = await db.execute(
            select(Post).options(selectinload(Post.author)).where(Post.id == post_id)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        return post

    async def list_posts(
        self,
        db: AsyncSession,
        author_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[PostResponse]:
        """
        All posts, newest first, each with its author projection.

        Args:
            author_id: only posts written by this user
            search:    case-insensitive substring matched against title or content

        Query plan (no filters):
            SELECT posts.* FROM posts ORDER BY created_at DESC
            + one SELECT ... WHERE users.id IN (...) for the authors
        """
        try:
            query = select(Post).options(selectinload(Post.author))

            if author_id:
                query = query.where(Post.author_id == author_id)

            term = (search or "").strip().lower()
            if term:
                query = query.where(
                    or_(
                        func.lower(Post.title).contains(term, autoescape=True),
                        func.lower(Post.content).contains(term, autoescape=True),
                    )
                )

            query = query.order_by(desc(Post.created_at))

            result = await db.execute(query)
            posts = result.scalars().all()
            return [_to_response(post, post.author) for post in posts]

        except Exception as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch posts",
                context={"error_type": type(e).__name__},
            )

    async def get_post(self, db: AsyncSession, post_id: str) -> PostResponse:
        """
        One post with its author projection.

        Raises:
            NotFoundError: no post with this id (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            post = await self._load(db, post_id)
            return _to_response(post, post.author)
        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch post", context={"post_id": post_id})

    async def create_post(
        self,
        db: AsyncSession,
        payload: PostCreate,
        session_user_id: Optional[str] = None,
        require_session: bool = False,
    ) -> PostResponse:
        """
        Creates a post owned by `payload.author_id`.

        Defaults: content → "", published → False.

        Raises:
            ValidationError:     missing title/authorId, or the author does not exist
            ForbiddenError:      authorId differs from the signed-in user
            AuthenticationError: sessions are required and none was presented
        """
        if not payload.title or not payload.author_id:
            raise ValidationError(
                message="Title and authorId are required",
                context={
                    "title_present": bool(payload.title),
                    "author_id_present": bool(payload.author_id),
                },
            )

        resolve_actor(session_user_id, payload.author_id, require_session)

        try:
            author = await db.get(User, payload.author_id)
            if author is None:
                raise ValidationError(
                    message="Author does not exist",
                    field="authorId",
                    context={"author_id": payload.author_id},
                )

            post = Post(
                title=payload.title,
                content=payload.content or "",
                published=bool(payload.published),
                author_id=author.id,
            )
            db.add(post)
            await db.flush()

            logger.info("Post %s created by %s", post.id, author.id)
            return _to_response(post, author)

        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create post",
                context={"error_type": type(e).__name__},
            )

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        payload: PostUpdate,
        session_user_id: Optional[str] = None,
        require_session: bool = False,
    ) -> PostResponse:
        """
        Applies the supplied fields to an existing post.

        Applied fields:
            title      when non-empty
            content    when supplied, the empty string included
            published  when supplied

        The post's author never changes; `payload.author_id` is only the
        claimed identity for the ownership check.
        """
        try:
            post = await self._load(db, post_id)

            ensure_owner(
                owner_id=post.author_id,
                session_user_id=session_user_id,
                claimed_user_id=payload.author_id,
                action="edit",
                require_session=require_session,
            )

            changed = False
            if payload.title:
                post.title = payload.title
                changed = True
            if payload.content is not None:
                post.content = payload.content
                changed = True
            if payload.published is not None:
                post.published = payload.published
                changed = True

            if changed:
                post.updated_at = datetime.now(timezone.utc)
                await db.flush()
                logger.info("Post %s updated", post.id)

            return _to_response(post, post.author)

        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error updating post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update post", context={"post_id": post_id})

    async def delete_post(
        self,
        db: AsyncSession,
        post_id: str,
        claimed_author_id: Optional[str] = None,
        session_user_id: Optional[str] = None,
        require_session: bool = False,
    ) -> MessageResponse:
        """
        Permanently removes a post after the ownership check.

        Deleting an id that does not exist raises NotFoundError every time;
        a second delete of the same id is therefore also a 404.
        """
        try:
            post = await db.get(Post, post_id)
            if post is None:
                raise NotFoundError(resource="Post", resource_id=post_id)

            ensure_owner(
                owner_id=post.author_id,
                session_user_id=session_user_id,
                claimed_user_id=claimed_author_id,
                action="delete",
                require_session=require_session,
            )

            await db.delete(post)
            await db.flush()
            logger.info("Post %s deleted", post_id)
            return MessageResponse(message="Post deleted successfully")

        except InkwellError:
            raise
        except Exception as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete post", context={"post_id": post_id})


post_service = PostService()
