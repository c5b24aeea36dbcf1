"""
Inkwell Backend — Seed Command Tests
======================================

The seed is idempotent: running it any number of times leaves two sample
authors and their four posts, one of them a draft.
"""

import pytest
from sqlalchemy import func, select

from inkwell.models.post import Post
from inkwell.models.user import User
from inkwell.seed import SAMPLE_POSTS, seed


async def _counts(database):
    async with database.session() as db:
        users = (await db.execute(select(func.count(User.id)))).scalar_one()
        posts = (await db.execute(select(func.count(Post.id)))).scalar_one()
        drafts = (
            await db.execute(select(func.count(Post.id)).where(Post.published.is_(False)))
        ).scalar_one()
    return users, posts, drafts


class TestSeed:

    @pytest.mark.asyncio
    async def test_seed_loads_sample_data(self, database):
        created = await seed(database)

        assert created == len(SAMPLE_POSTS)
        assert await _counts(database) == (2, 4, 1)

    @pytest.mark.asyncio
    async def test_seed_twice_leaves_the_same_data(self, database):
        await seed(database)
        await seed(database)

        assert await _counts(database) == (2, 4, 1)

    @pytest.mark.asyncio
    async def test_seed_keeps_other_users_posts(self, database):
        async with database.session() as db:
            other = User(email="other@x.com")
            db.add(other)
            await db.flush()
            db.add(Post(title="mine", author_id=other.id))

        await seed(database)

        assert await _counts(database) == (3, 5, 1)
