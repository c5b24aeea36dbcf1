"""
Inkwell Backend — Session Route Handlers
==========================================

What:  Development sign-in (POST /auth/session) and "who am I"
       (GET /auth/session).
Why:   Gives clients a verified identity so ownership checks do not have to
       trust an authorId typed into a request body.

There is no password or OAuth provider: signing in with an email upserts
that user and issues a token. Put a real identity provider in front of this
endpoint before exposing it publicly.
"""

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.session import SessionManager, get_session_manager, require_session_user_id
from inkwell.database import commit_session, get_db_session
from inkwell.exceptions import AuthenticationError, NotFoundError
from inkwell.schemas.user import SessionCreate, SessionResponse, UserResponse
from inkwell.services.user_service import user_service, user_to_response

logger = logging.getLogger(__name__)


async def create_session(
    payload: SessionCreate,
    db: AsyncSession = Depends(get_db_session),
    sessions: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Sign in by email; the user is created on first sign-in."""
    user = await user_service.upsert_by_email(db, payload.email, payload.name)
    await commit_session(db)
    token, expires_at = sessions.issue(user.id)
    logger.info("Session issued for user %s", user.id)
    return SessionResponse(
        token=token,
        expires_at=expires_at,
        user=user_to_response(user),
    )


async def read_session(
    user_id: str = Depends(require_session_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """The signed-in user. A token for a deleted user is treated as invalid."""
    try:
        return await user_service.get_user_summary(db, user_id)
    except NotFoundError:
        raise AuthenticationError(message="Invalid or expired session")
