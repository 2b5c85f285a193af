"""Async engine, session factory and the request-scoped session dependency."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from clinicdesk.config import settings


def async_database_url(url: str) -> str:
    """Point plain ``postgresql://`` URLs at the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    """
    Create an async engine for PostgreSQL (asyncpg) or SQLite (aiosqlite).

    Pool sizing and the asyncpg application name only apply to PostgreSQL.

    Args:
        url: Database URL, sync or async form
        **overrides: Extra ``create_async_engine`` arguments, e.g. ``poolclass``

    Returns:
        Configured async engine
    """
    url = async_database_url(url)
    options: dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}

    if make_url(url).get_backend_name() == "postgresql":
        options["connect_args"] = {
            "server_settings": {"application_name": settings.app_name},
        }
        if "poolclass" not in overrides:
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=3600,
            )

    options.update(overrides)
    return create_async_engine(url, **options)


engine: AsyncEngine = build_engine(settings.database_url)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
