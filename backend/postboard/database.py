"""
Postboard Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine factory, declarative base and the per-request
       session dependency.
How:   `create_app()` builds one engine and one session factory from the
       settings and stores them on `app.state`. `get_db_session` opens a
       session per request, commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.

Connection Pooling:
    pool_size / max_overflow / pre_ping come from settings and only apply to
    server databases (PostgreSQL via asyncpg). SQLite URLs (tests, local
    experiments) use SQLAlchemy's default pool for the dialect.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from postboard.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Creates the async engine described by `settings.database_url`."""
    options = {
        # SQL echo is only useful during development
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response models read attributes after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def create_tables(engine: AsyncEngine) -> None:
    """Creates any missing tables registered on `Base.metadata`."""
    # Model modules register themselves with Base on import
    from postboard.models import post, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory stored on app.state
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine(engine: AsyncEngine) -> None:
    """Closes all pooled connections. Called on application shutdown."""
    await engine.dispose()
