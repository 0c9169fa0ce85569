"""Database engine and session management."""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings
from infrastructure.database.models import Base


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by ``settings``."""
    url = settings.async_database_url

    # Supabase uses Supavisor (connection pooler) in transaction mode.
    # asyncpg's prepared statement cache is incompatible with transaction-mode
    # pooling, so we disable it when connecting through the pooler.
    connect_args: dict[str, Any] = {}
    if "pooler.supabase.com" in url:
        connect_args["statement_cache_size"] = 0

    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
