"""
ORM models. Importing this package registers every table with
`Base.metadata` (Alembic autogenerate and `Database.create_all()` rely on it).
"""

from inkwell.models.post import Post
from inkwell.models.user import User

__all__ = ["Post", "User"]
