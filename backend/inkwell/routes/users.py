"""
Inkwell Backend — User Route Handlers
=======================================

What:  Handlers for /users/{user_id}: detail with posts, update, delete.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.database import commit_session, get_db_session
from inkwell.schemas.common import MessageResponse
from inkwell.schemas.user import UserDetailResponse, UserResponse, UserUpdate
from inkwell.services.user_service import user_service


async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> UserDetailResponse:
    return await user_service.get_user(db, user_id)


async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """Update email and/or name; a taken email answers 409."""
    user = await user_service.update_user(db, user_id, payload)
    await commit_session(db)
    return user


async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """Delete a user and, by cascade, all of their posts."""
    result = await user_service.delete_user(db, user_id)
    await commit_session(db)
    return result
