# playergate/app/db/session.py
"""
Async database handle for SQLAlchemy.

The Database object owns the engine and the session factory. It is
created by the application lifespan (opened at startup, disposed at
shutdown) and handed to request handlers through app.state, so no
module-level engine exists.

Production considerations:
- Uses asyncpg for PostgreSQL
- Uses aiosqlite for SQLite (local development and tests)
- Pool settings differ for SQLite (no pooling) vs PostgreSQL
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from playergate.app.core.errors import storage_errors
from playergate.app.db.upsert import check_supported_url

logger = logging.getLogger(__name__)


def _begin_immediate(engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction take the write lock up front.

    With the driver's default deferred BEGIN, two writers can both hold
    a shared lock and deadlock on upgrade, and SQLite then fails one of
    them without waiting. BEGIN IMMEDIATE makes the second writer wait
    in the busy handler instead.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _create_async_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    SQLite:
    - NullPool (SQLite doesn't benefit from connection pooling)
    - check_same_thread=False for async compatibility
    - BEGIN IMMEDIATE so concurrent writers queue instead of failing

    PostgreSQL:
    - AsyncAdaptedQueuePool, pool_size=5, max_overflow=10
    - pool_pre_ping=True to detect stale connections
    - pool_recycle=300 (cloud hosts may close idle connections)
    """
    if "sqlite" in url.lower():
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
        _begin_immediate(engine)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )


class Database:
    """
    Store handle with an explicit lifecycle.

    Usage:
        db = Database(settings.DATABASE_URL)
        await db.create_all()
        async with db.session() as session:
            ...
        await db.dispose()
    """

    def __init__(self, url: str, echo: bool = False):
        check_supported_url(url)
        self.url = url
        self.engine: AsyncEngine = _create_async_engine(url, echo)
        # expire_on_commit=False: attributes stay readable after commit
        # autoflush=False: explicit flush control
        self.sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """Create all tables known to the declarative Base."""
        # Models must be imported so their tables are registered
        from playergate.app import models  # noqa: F401
        from playergate.app.db.base import Base

        with storage_errors():
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield one session per unit of work.

        This does NOT auto-commit; services commit or roll back
        explicitly. The session is closed even if the caller raises.
        """
        async with self.sessionmaker() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")
