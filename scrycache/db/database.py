"""
Database engine and session management.

Provides async SQLAlchemy engine and session factory construction. Nothing
here is bound at import time; every CardStore owns its own engine.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from scrycache.models.db import Base


def is_memory_url(database_url: str) -> bool:
    """True for SQLite URLs that point at a private in-memory database."""
    if not database_url.startswith("sqlite"):
        return False
    path = database_url.split("://", 1)[-1]
    return ":memory:" in path or path in ("", "/")


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for a database URL.

    In-memory SQLite gets a single shared connection (StaticPool) so that
    every session sees the same database.
    """
    if is_memory_url(database_url):
        return create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay readable after commit."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models. Safe to call on a database
    that already has them.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
