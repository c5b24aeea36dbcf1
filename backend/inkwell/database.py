"""
Inkwell Backend — Database Handle & Session Management
========================================================

What:  The `Database` handle (async engine + session factory), the declarative
       base for models, the UTC timestamp column type and the per-request
       session dependency.
Why:   Centralizes connection logic while keeping the engine an explicitly
       owned object: the application factory creates one Database, stores it
       on `app.state`, and disposes it on shutdown. Tests create their own.
How:   `get_db_session()` pulls the handle from the request's application and
       yields a session. Handlers that write call `commit_session()` before
       returning, so a failed commit is reported to the client as a 500
       instead of after the response has already gone out.

Connection Pooling Strategy:
    PostgreSQL: pool_size / max_overflow / pre_ping from settings, connections
                recycled hourly.
    SQLite:     a single StaticPool connection (an in-memory database only
                exists for the lifetime of its connection) with foreign keys
                switched on so ON DELETE CASCADE behaves like PostgreSQL, and
                explicit BEGIN so SAVEPOINTs nest inside the transaction.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import DateTime, event, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator
from starlette.requests import Request

from inkwell.config import Settings
from inkwell.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for autogenerate
    and tests use for `create_all()`.
    """
    pass


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always round-trips as UTC.

    PostgreSQL stores TIMESTAMPTZ and returns aware values already. SQLite has
    no timezone support and returns naive values; those are read back as UTC,
    which is what was written.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # Driver-level autocommit; SQLAlchemy emits BEGIN itself (see _sqlite_begin)
    dbapi_connection.isolation_level = None
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


class Database:
    """
    Owns the async engine and the session factory for one application.

    Attributes:
        engine:          AsyncEngine bound to `settings.database_url`
        session_factory: async_sessionmaker producing AsyncSession instances
                         with expire_on_commit=False (responses are built from
                         ORM objects after the transaction is committed)
    """

    def __init__(self, settings: Settings):
        url = make_url(settings.database_url)
        echo = settings.log_level == "DEBUG"

        if url.get_backend_name() == "sqlite":
            self.engine = create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
            event.listen(self.engine.sync_engine, "connect", _configure_sqlite_connection)
            event.listen(self.engine.sync_engine, "begin", _sqlite_begin)
        else:
            self.engine = create_async_engine(
                url,
                echo=echo,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yields one transactional session (seed command, scripts).

        On success: commit. On any error: rollback and re-raise.
        Always: close (connection back to pool).
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Creates every table known to `Base.metadata` (tests, local dev)."""
        # Models must be imported so their tables are registered
        import inkwell.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Runs SELECT 1; used by the health check."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Gracefully closes all pooled connections (application shutdown)."""
        await self.engine.dispose()


async def commit_session(session: AsyncSession) -> None:
    """
    Commits the request's unit of work.

    Called by write handlers before they return, so the client only sees a
    success status once the data is durable.

    Raises:
        DatabaseError: the commit failed; the transaction is rolled back
    """
    try:
        await session.commit()
    except Exception as e:
        logger.error("Commit failed: %s", str(e), exc_info=True)
        await session.rollback()
        raise DatabaseError(
            message="Failed to save changes",
            context={"error_type": type(e).__name__},
        )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The Database handle is looked up on the application serving the request,
    so each app instance (and each test) talks to its own engine.

    Nothing is committed here: exit code of a yield dependency may run after
    the response is sent. Write handlers commit with `commit_session()`;
    anything left uncommitted is rolled back when the session closes.

    Example usage in a route:
        async def delete_user(user_id: str, db: AsyncSession = Depends(get_db_session)):
            result = await user_service.delete_user(db, user_id)
            await commit_session(db)
            return result
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
