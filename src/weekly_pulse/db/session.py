# ABOUTME: Async database session management for SQLAlchemy.
# ABOUTME: Provides engine/session factory singletons and a commit-or-rollback session scope.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from weekly_pulse.config import get_settings
from weekly_pulse.db.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

_engine: "AsyncEngine | None" = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> "AsyncEngine":
    """Get or create the async database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        pool_args = (
            {}
            if settings.uses_sqlite
            else {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_pool_max_overflow,
            }
        )
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
            **pool_args,
        )
    return _engine


def create_session_factory(engine: "AsyncEngine") -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


@asynccontextmanager
async def get_session(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession]:
    """Context manager for database sessions with automatic commit/rollback.

    Everything executed inside the block is one transaction.

    Usage:
        async with get_session() as session:
            result = await session.execute(query)
    """
    factory = factory or get_session_factory()
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db(engine: "AsyncEngine | None" = None) -> None:
    """Initialize database tables (creates all tables if they don't exist).

    Note: For development and tests. Production schemas are provisioned separately.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close the database engine and release connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
