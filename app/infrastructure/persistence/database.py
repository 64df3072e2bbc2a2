"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

PostgreSQL (asyncpg) in production, with schema managed by Alembic
migrations. SQLite (aiosqlite) is supported for tests and local runs; its
schema is created with Base.metadata.create_all.

Engine and session factory are created lazily on first use (get_db /
get_db_transactional) so import does not trigger Settings validation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _enable_sqlite_savepoints(sqlite_engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT (begin_nested) works on pysqlite/aiosqlite."""

    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _do_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine.sync_engine, "begin")
    def _do_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_engine_for_url(
    url: str,
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    command_timeout: int | None = None,
) -> AsyncEngine:
    """Create an async engine for a postgresql+asyncpg or sqlite+aiosqlite URL.

    In-memory SQLite uses a single shared connection (StaticPool) so every
    session sees the same database.
    """
    if "sqlite" in url:
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_async_engine(url, echo=echo, **kwargs)
        _enable_sqlite_savepoints(sqlite_engine)
        return sqlite_engine
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=pool_size if pool_size is not None else 10,
        max_overflow=max_overflow if max_overflow is not None else 20,
        pool_recycle=3600,
        connect_args={
            "command_timeout": command_timeout if command_timeout is not None else 60
        },
    )


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the app, scripts and tests."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    engine = create_engine_for_url(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        command_timeout=settings.db_command_timeout,
    )
    AsyncSessionLocal = make_session_factory(engine)


async def dispose_engine() -> None:
    """Dispose the engine (app shutdown) and forget the session factory."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def create_all() -> None:
    """Create all tables (SQLite/local runs; PostgreSQL uses Alembic)."""
    from app.infrastructure.persistence import models  # noqa: F401  (register mappers)

    _ensure_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """Database session dependency for read operations.

    Does not commit; use get_db_transactional for writes.
    Yields a session and closes it on exit.
    """
    _ensure_engine()
    async with AsyncSessionLocal() as session:
        yield session


async def get_db_transactional():
    """Database session dependency for write operations.

    Begins a transaction, commits on success, rolls back on exception.
    Use for POST, PUT, PATCH, DELETE endpoints.
    """
    _ensure_engine()
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Short-lived session closed on exit (auth lookups, scripts).

    Closing before the request's own session starts keeps SQLite, which
    allows one open transaction per connection, out of nested BEGINs.
    """
    _ensure_engine()
    async with AsyncSessionLocal() as session:
        yield session
