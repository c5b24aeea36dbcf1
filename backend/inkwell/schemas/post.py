"""
Inkwell Backend — Post Schemas
================================

What:  Request bodies for creating/updating posts and the Post+author response.
Why:   Request bodies are validated for *shape* here (types only). Business
       rules such as "title must be non-empty" live in PostService so that the
       same rules apply to the seed command and to tests that skip HTTP.

Field presence matters for updates:
    A field left out of a PUT body is `None` and is not touched. `content`
    may be set to the empty string; `title` may not be emptied.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from inkwell.schemas.common import CamelModel

EXCERPT_LENGTH = 150


def truncate_content(content: Optional[str], max_length: int = EXCERPT_LENGTH) -> str:
    """Returns content cut to `max_length` characters with '...' appended when cut."""
    if not content:
        return ""
    if len(content) > max_length:
        return content[:max_length] + "..."
    return content


class AuthorSummary(CamelModel):
    """Reduced author projection embedded in every post response."""
    id: str
    email: str
    name: Optional[str] = None


class PostResponse(CamelModel):
    """
    A post together with its author projection.

    `excerpt` is the content truncated for list views.
    """
    id: str = Field(description="Unique post identifier")
    title: str
    content: str
    excerpt: str = Field(description="Content truncated to 150 characters")
    published: bool
    author_id: str
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary


class PostCreate(CamelModel):
    """
    Body of POST /posts.

    title and authorId are Optional at the schema level on purpose: their
    absence is reported by PostService as a 400 with a specific message.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    published: Optional[bool] = None
    author_id: Optional[str] = None


class PostUpdate(CamelModel):
    """
    Body of PUT /posts/{id}.

    author_id is the *claimed* identity of the editor, used only for the
    ownership check. It is never written.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    published: Optional[bool] = None
    author_id: Optional[str] = None
