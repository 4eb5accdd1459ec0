"""
SubTrack Backend: Database Engine & Session Helpers
===================================================

What:  Declarative base, async engine construction and session factory.
Why:   Both storage backends share the same SQLAlchemy plumbing; only the URL,
       pool options and driver differ.
How:   Each storage backend builds its own AsyncEngine through create_engine()
       and gets a session factory from build_session_factory(). Sessions are
       opened per operation, never shared between requests.

Connection Pooling:
    PostgreSQL: pool_size = settings.pg_max_pool_size, pool_pre_ping on,
                recycled hourly to drop stale connections after DB restarts.
    SQLite:     SQLAlchemy's default pool for file databases; tests pass a
                StaticPool engine so an in-memory database survives across sessions.
"""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from subtrack.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object so Alembic and the test fixtures see the same schema.
    """
    pass


def create_engine(url: str, **engine_kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQL echo follows the DEBUG log level; it is too noisy for anything else.
    """
    return create_async_engine(
        url,
        echo=settings.log_level == "DEBUG",
        **engine_kwargs,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to one engine.

    expire_on_commit=False: rows read inside a transaction stay readable after
    the commit, when the storage converts them into domain records.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
