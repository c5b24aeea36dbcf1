"""
Inkwell Backend — Post Route Handlers
=======================================

What:  Handlers for /posts and /posts/{post_id}.
How:   Extract path/query/body values, resolve the caller's session identity,
       delegate to PostService. Paths, methods and status codes are declared
       in `inkwell.routes.table`, not here.

Routes are THIN: no business rule lives in this module.
"""

import logging
from typing import List, Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.session import get_session_user_id
from inkwell.database import commit_session, get_db_session
from inkwell.schemas.common import MessageResponse
from inkwell.schemas.post import PostCreate, PostResponse, PostUpdate
from inkwell.services.post_service import post_service

logger = logging.getLogger(__name__)


def _require_session(request: Request) -> bool:
    return request.app.state.settings.require_session_for_writes


async def list_posts(
    author_id: Optional[str] = Query(
        default=None,
        alias="authorId",
        description="Only return posts written by this user",
    ),
    q: Optional[str] = Query(
        default=None,
        description="Case-insensitive search over title and content",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    """All posts, newest first."""
    return await post_service.list_posts(db, author_id=author_id, search=q)


async def create_post(
    payload: PostCreate,
    request: Request,
    session_user_id: Optional[str] = Depends(get_session_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """Create a post; answers 201 with the stored post."""
    post = await post_service.create_post(
        db,
        payload,
        session_user_id=session_user_id,
        require_session=_require_session(request),
    )
    await commit_session(db)
    return post


async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.get_post(db, post_id)


async def update_post(
    post_id: str,
    payload: PostUpdate,
    request: Request,
    session_user_id: Optional[str] = Depends(get_session_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """Edit a post the caller owns."""
    post = await post_service.update_post(
        db,
        post_id,
        payload,
        session_user_id=session_user_id,
        require_session=_require_session(request),
    )
    await commit_session(db)
    return post


async def delete_post(
    post_id: str,
    request: Request,
    author_id: Optional[str] = Query(
        default=None,
        alias="authorId",
        description="Claimed identity of the caller, checked against the post's author",
    ),
    session_user_id: Optional[str] = Depends(get_session_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """Delete a post the caller owns."""
    result = await post_service.delete_post(
        db,
        post_id,
        claimed_author_id=author_id,
        session_user_id=session_user_id,
        require_session=_require_session(request),
    )
    await commit_session(db)
    return result
