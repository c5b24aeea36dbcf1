"""
Inkwell Backend — Sample Data
===============================

What:  Fills the database with two authors and a handful of posts.
How:   `python -m inkwell.seed` (uses DATABASE_URL like the API does).

Idempotent: authors are upserted by email, their previous posts are deleted
and the sample posts inserted again, so running it twice leaves the same
data behind. Tables must already exist (`alembic upgrade head`), unless
`--create-tables` is passed.
"""

import argparse
import asyncio
import logging
from typing import Optional

from sqlalchemy import delete

from inkwell.config import Settings, settings as default_settings
from inkwell.database import Database
from inkwell.models.post import Post
from inkwell.schemas.post import PostCreate
from inkwell.services.post_service import post_service
from inkwell.services.user_service import user_service

logger = logging.getLogger("inkwell.seed")

SAMPLE_USERS = [
    {"email": "john@example.com", "name": "John Doe"},
    {"email": "jane@example.com", "name": "Jane Smith"},
]

# (author index, title, content, published)
SAMPLE_POSTS = [
    (
        0,
        "Getting Started with FastAPI",
        "FastAPI builds APIs from type hints: request bodies are validated by "
        "Pydantic models and the OpenAPI document is generated for free. This "
        "post walks through a first endpoint, dependency injection and testing "
        "with an ASGI client.",
        True,
    ),
    (
        1,
        "Understanding the SQLAlchemy ORM",
        "SQLAlchemy maps classes to tables and keeps a unit of work per session. "
        "Relationships, eager loading and cascades cover most of what a blog "
        "backend needs, and the same models run on PostgreSQL and SQLite.",
        True,
    ),
    (
        0,
        "Writing Migrations with Alembic",
        "Alembic versions the schema next to the code. Each revision has an "
        "upgrade and a downgrade, and autogenerate compares the models with the "
        "live database to draft the next one.",
        True,
    ),
    (
        1,
        "Draft Post - Work in Progress",
        "Topics to cover: sessions, ownership checks, deployment. "
        "Check back soon for the complete version of this post!",
        False,
    ),
]


async def seed(database: Database) -> int:
    """Upserts the sample authors and replaces their posts. Returns posts created."""
    created = 0
    async with database.session() as db:
        users = [
            await user_service.upsert_by_email(db, entry["email"], entry["name"])
            for entry in SAMPLE_USERS
        ]

        await db.execute(delete(Post).where(Post.author_id.in_([u.id for u in users])))

        for author_index, title, content, published in SAMPLE_POSTS:
            await post_service.create_post(
                db,
                PostCreate(
                    title=title,
                    content=content,
                    published=published,
                    author_id=users[author_index].id,
                ),
            )
            created += 1

    logger.info("Seeded %d users and %d posts", len(users), created)
    return created


async def _main(config: Settings, create_tables: bool) -> None:
    database = Database(config)
    try:
        if create_tables:
            await database.create_all()
        await seed(database)
    finally:
        await database.dispose()


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Load sample authors and posts.")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables first (local development without Alembic)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    asyncio.run(_main(default_settings, args.create_tables))
    print("Database seeded successfully!")


if __name__ == "__main__":
    main()
