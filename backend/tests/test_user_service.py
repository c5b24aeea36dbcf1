"""
Inkwell Backend — User Service Unit Tests
===========================================

What we test:
    ✅ get_user returns the projection plus posts, newest first
    ✅ update_user: email uniqueness (pre-check and constraint race), name rules
    ✅ delete_user cascades to the user's posts
    ✅ upsert_by_email is idempotent
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from conftest import make_user
from inkwell.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from inkwell.models.post import Post
from inkwell.models.user import User
from inkwell.schemas.user import UserUpdate
from inkwell.services.user_service import UserService


class TestGetUser:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_get_user_with_posts_newest_first(self, db_session):
        user = await make_user(db_session, "a@x.com", "Alice")
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        for offset, title in ((1, "middle"), (0, "oldest"), (2, "newest")):
            db_session.add(
                Post(
                    title=title,
                    content=f"{title} body",
                    author_id=user.id,
                    created_at=base + timedelta(days=offset),
                    updated_at=base + timedelta(days=offset),
                )
            )
        await db_session.flush()

        detail = await self.service.get_user(db_session, user.id)

        assert detail.id == user.id
        assert detail.email == "a@x.com"
        assert detail.name == "Alice"
        assert [p.title for p in detail.posts] == ["newest", "middle", "oldest"]
        assert detail.posts[0].content == "newest body"

    @pytest.mark.asyncio
    async def test_get_user_without_posts(self, db_session):
        user = await make_user(db_session, "a@x.com")

        detail = await self.service.get_user(db_session, user.id)

        assert detail.posts == []
        assert detail.name is None

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, db_session):
        with pytest.raises(NotFoundError, match="User not found"):
            await self.service.get_user(db_session, "missing")

    @pytest.mark.asyncio
    async def test_get_user_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(DatabaseError, match="Failed to fetch user"):
            await self.service.get_user(mock_db_session, "any")


class TestUpdateUser:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_update_email_taken_by_another_user(self, db_session):
        alice = await make_user(db_session, "a@x.com", "Alice")
        bob = await make_user(db_session, "b@x.com", "Bob")

        with pytest.raises(ConflictError, match="User with this email already exists"):
            await self.service.update_user(db_session, bob.id, UserUpdate(email="a@x.com"))

        assert alice.email == "a@x.com"
        assert bob.email == "b@x.com"
        emails = (await db_session.execute(select(User.email).order_by(User.email))).scalars().all()
        assert emails == ["a@x.com", "b@x.com"]

    @pytest.mark.asyncio
    async def test_update_email_to_own_address(self, db_session):
        alice = await make_user(db_session, "a@x.com", "Alice")

        updated = await self.service.update_user(db_session, alice.id, UserUpdate(email="a@x.com"))

        assert updated.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_update_email_and_name(self, db_session):
        alice = await make_user(db_session, "a@x.com", "Alice")

        updated = await self.service.update_user(
            db_session, alice.id, UserUpdate(email="alice@x.com", name="Alice B")
        )

        assert updated.email == "alice@x.com"
        assert updated.name == "Alice B"

    @pytest.mark.asyncio
    async def test_update_explicit_null_name_clears_it(self, db_session):
        alice = await make_user(db_session, "a@x.com", "Alice")

        updated = await self.service.update_user(
            db_session, alice.id, UserUpdate.model_validate({"name": None})
        )

        assert updated.name is None

    @pytest.mark.asyncio
    async def test_update_absent_name_is_kept(self, db_session):
        alice = await make_user(db_session, "a@x.com", "Alice")

        updated = await self.service.update_user(
            db_session, alice.id, UserUpdate.model_validate({"email": "new@x.com"})
        )

        assert updated.name == "Alice"
        assert updated.email == "new@x.com"

    @pytest.mark.asyncio
    async def test_update_empty_email_is_ignored(self, db_session):
        alice = await make_user(db_session, "a@x.com")

        updated = await self.service.update_user(db_session, alice.id, UserUpdate(email=""))

        assert updated.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_user(db_session, "missing", UserUpdate(name="x"))

    @pytest.mark.asyncio
    async def test_unique_constraint_race_is_a_conflict(self, mock_db_session):
        """The pre-check passes but the UNIQUE constraint fires on flush."""
        user = MagicMock()
        user.email = "b@x.com"
        mock_db_session.get.return_value = user
        no_holder = MagicMock()
        no_holder.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = no_holder
        mock_db_session.flush.side_effect = IntegrityError(
            "UPDATE users", {}, Exception("UNIQUE constraint failed: users.email")
        )

        with pytest.raises(ConflictError):
            await self.service.update_user(mock_db_session, "u1", UserUpdate(email="a@x.com"))


class TestDeleteUser:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_delete_cascades_to_posts(self, db_session):
        alice = await make_user(db_session, "a@x.com")
        bob = await make_user(db_session, "b@x.com")
        alice_id, bob_id = alice.id, bob.id
        db_session.add_all([
            Post(title="a1", author_id=alice_id),
            Post(title="a2", author_id=alice_id),
            Post(title="b1", author_id=bob_id),
        ])
        await db_session.flush()

        result = await self.service.delete_user(db_session, alice_id)

        assert result.message == "User deleted successfully"
        remaining = (
            await db_session.execute(select(Post.author_id, func.count()).group_by(Post.author_id))
        ).all()
        assert remaining == [(bob_id, 1)]
        assert await db_session.get(User, alice_id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_user(db_session, "missing")


class TestUpsertByEmail:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_upsert_creates_then_returns_existing(self, db_session):
        first = await self.service.upsert_by_email(db_session, "a@x.com", "Alice")
        second = await self.service.upsert_by_email(db_session, " a@x.com ", "Someone Else")

        assert first.id == second.id
        assert second.name == "Alice"
        count = (await db_session.execute(select(func.count(User.id)))).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_upsert_requires_email(self, db_session):
        with pytest.raises(ValidationError, match="Email is required"):
            await self.service.upsert_by_email(db_session, "   ")

    @pytest.mark.asyncio
    async def test_lost_insert_race_keeps_earlier_work(self, db_session, monkeypatch):
        """A duplicate insert only undoes itself, not the rest of the transaction."""
        existing = await self.service.upsert_by_email(db_session, "a@x.com", "Alice")
        earlier = await self.service.upsert_by_email(db_session, "b@x.com", "Bob")
        existing_id, earlier_id = existing.id, earlier.id

        lookup = self.service._get_by_email
        calls = []

        async def lookup_misses_once(db, email):
            # First lookup runs "before" the competing insert became visible
            calls.append(email)
            if len(calls) == 1:
                return None
            return await lookup(db, email)

        monkeypatch.setattr(self.service, "_get_by_email", lookup_misses_once)

        user = await self.service.upsert_by_email(db_session, "a@x.com", "Someone Else")

        assert user.id == existing_id
        rows = (
            await db_session.execute(select(User.id, User.email).order_by(User.email))
        ).all()
        assert rows == [(existing_id, "a@x.com"), (earlier_id, "b@x.com")]
