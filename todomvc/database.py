"""
TodoMVC — Database Engine and Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   A `Database` handle owns one engine (and therefore one connection pool)
       plus its session factory. The application creates exactly one handle
       at startup, stores it on `app.state.database`, and every request
       borrows a session (one pooled connection) from it for the duration of
       one operation.
Who:   The app factory creates/disposes it; route handlers receive sessions
       through `get_db_session`; tests build their own handle on SQLite.

Connection Pooling:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour
    SQLite URLs keep SQLAlchemy's default pool and skip these options.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from todomvc.config import Settings
from todomvc.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `Database.create_all()`
    and Alembic autogeneration.
    """
    pass


def _emit_sqlite_begin(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy, not the sqlite3 driver, issue BEGIN.

    The driver otherwise defers BEGIN until the first write, which breaks
    SAVEPOINT scoping. IMMEDIATE takes the write lock up front, so
    concurrent sessions wait on the busy timeout instead of deadlocking.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Process-wide handle on the connection pool.

    Created once per application lifetime and passed explicitly to whoever
    needs a session; there is no module-level engine.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            _emit_sqlite_begin(self.engine)
        # expire_on_commit=False: ORM objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the handle with pool sizing taken from settings."""
        engine_kwargs: Dict[str, Any] = {
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return cls(settings.database_url, **engine_kwargs)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session that commits on success and rolls back on error.

        The session is always closed, which returns its connection to the pool.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

            try:
                await session.commit()
            except SQLAlchemyError as e:
                logger.error("Commit failed: %s", str(e))
                await session.rollback()
                raise DatabaseError(
                    message=f"Could not commit changes: {e}",
                    context={"error_type": type(e).__name__},
                ) from e

    async def create_all(self) -> None:
        """Create every table known to `Base.metadata` (tests and local runs)."""
        # Models register themselves with Base on import
        from todomvc.models import task  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Run `SELECT 1`; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Borrows the application's `Database` handle from `app.state`, so every
    request shares the one pool created at startup. Declare it with
    `scope="function"` so the commit finishes before the response is sent.

    Example usage in a route:
        @router.get("/tasks")
        async def get_tasks(db: AsyncSession = Depends(get_db_session, scope="function")):
            return await task_service.list_tasks(db)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
