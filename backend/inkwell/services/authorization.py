"""
Inkwell Backend — Ownership Checks
====================================

What:  Decides which identity is acting on a request and whether that identity
       may change a given record.
Who:   Called by PostService before every create, update and delete.

Identity sources, strongest first:
    1. session_user_id  — verified from a signed session token
    2. claimed_user_id  — the `authorId` supplied in the body or query string

    When both are present they must agree; a request cannot claim to act for
    someone other than the signed-in user. When only the claim is present it
    is used as-is, unless `require_session` is set, in which case the request
    is rejected as unauthenticated.

Every check here runs before any write, so a rejected request never leaves a
partial change behind.
"""

import logging
from typing import Optional

from inkwell.exceptions import AuthenticationError, ForbiddenError

logger = logging.getLogger(__name__)


def resolve_actor(
    session_user_id: Optional[str],
    claimed_user_id: Optional[str],
    require_session: bool = False,
) -> Optional[str]:
    """
    Returns the identity the request acts as, or None when it supplies none.

    Raises:
        ForbiddenError: the claimed id contradicts the session identity
        AuthenticationError: require_session is set and there is no session
    """
    if session_user_id is not None:
        if claimed_user_id and claimed_user_id != session_user_id:
            logger.warning(
                "Session user %s claimed to act as %s", session_user_id, claimed_user_id
            )
            raise ForbiddenError(
                message="authorId does not match the signed-in user",
                context={"session_user_id": session_user_id, "claimed": claimed_user_id},
            )
        return session_user_id

    if require_session:
        raise AuthenticationError(message="Sign in to modify posts")

    return claimed_user_id or None


def ensure_owner(
    owner_id: str,
    session_user_id: Optional[str],
    claimed_user_id: Optional[str],
    action: str,
    require_session: bool = False,
) -> None:
    """
    Allows the request only if its acting identity owns the record.

    A request with no identity at all passes (unless sessions are required);
    that keeps clients that never send an authorId working.

    Args:
        owner_id:  the record's owning user id (Post.author_id)
        action:    verb used in the error message ("edit", "delete")
    """
    actor = resolve_actor(session_user_id, claimed_user_id, require_session)
    if actor is not None and actor != owner_id:
        raise ForbiddenError(
            message=f"Unauthorized to {action} this post",
            context={"actor": actor, "owner": owner_id},
        )
