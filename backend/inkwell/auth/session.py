"""
Inkwell Backend — Session Tokens
==================================

What:  Issues and verifies session tokens, and exposes the FastAPI dependency
       that resolves the caller's identity from the Authorization header.
How:   HS256 JWTs (python-jose) with `sub` = User.id and an `exp` claim.
       The secret, algorithm and lifetime come from Settings.

Resolution rules:
    - No Authorization header           → anonymous (None)
    - Valid bearer token                → the token's subject
    - Malformed, expired or forged token → AuthenticationError (401)

    A bad token is never downgraded to "anonymous": a client holding an
    expired token would otherwise silently fall back to trusting whatever
    authorId it puts in the request body.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from starlette.requests import Request

from inkwell.config import Settings
from inkwell.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class SessionManager:
    """Signs and verifies session tokens with the configured secret."""

    def __init__(self, settings: Settings):
        self._secret = settings.session_secret
        self._algorithm = settings.session_algorithm
        self._ttl = timedelta(minutes=settings.session_ttl_minutes)

    def issue(self, user_id: str) -> Tuple[str, datetime]:
        """Returns (token, expires_at) for the given user id."""
        now = datetime.now(timezone.utc)
        expires_at = now + self._ttl
        claims = {
            "sub": user_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return token, expires_at

    def verify(self, token: str) -> str:
        """
        Returns the user id a token was issued for.

        Raises:
            AuthenticationError: bad signature, expired, or no subject
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.info("Rejected session token: %s", type(e).__name__)
            raise AuthenticationError(
                message="Invalid or expired session",
                context={"reason": type(e).__name__},
            )

        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise AuthenticationError(message="Invalid or expired session")
        return subject


def get_session_manager(request: Request) -> SessionManager:
    """Dependency: the SessionManager owned by the serving application."""
    return request.app.state.session_manager


async def get_session_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[str]:
    """
    Dependency: the verified caller identity, or None for anonymous requests.
    """
    if credentials is None:
        return None
    return sessions.verify(credentials.credentials)


async def require_session_user_id(
    user_id: Optional[str] = Depends(get_session_user_id),
) -> str:
    """Dependency: like get_session_user_id, but anonymous callers get a 401."""
    if user_id is None:
        raise AuthenticationError(message="Sign in to continue")
    return user_id
