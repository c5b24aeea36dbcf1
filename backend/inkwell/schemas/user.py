"""
Inkwell Backend — User & Session Schemas
==========================================

What:  User projections, the user update body and the session sign-in shapes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from inkwell.schemas.common import CamelModel


class UserResponse(CamelModel):
    """User projection: never exposes anything beyond these fields."""
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserPostItem(CamelModel):
    """Reduced post projection listed under a user."""
    id: str
    title: str
    content: str
    published: bool
    created_at: datetime
    updated_at: datetime


class UserDetailResponse(UserResponse):
    """User projection plus their posts, newest first."""
    posts: List[UserPostItem] = Field(default_factory=list)


class UserUpdate(CamelModel):
    """
    Body of PUT /users/{id}.

    `name` is applied whenever the key is present, including an explicit
    null (clears the name). `email` is applied only when non-empty.
    """
    email: Optional[str] = None
    name: Optional[str] = None


class SessionCreate(CamelModel):
    """Body of POST /auth/session (development sign-in by email)."""
    email: str
    name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Rejects values that cannot possibly be an email address."""
        v = v.strip()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("email must be a valid email address")
        return v


class SessionResponse(CamelModel):
    """Issued session: a bearer token plus the signed-in user."""
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse
