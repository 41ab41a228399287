"""SQLAlchemy 2.x async database setup.

Engines are built from ``DatabaseSettings``; nothing connects at import time.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import DatabaseSettings
from .models import Base


def build_engine(config: DatabaseSettings) -> AsyncEngine:
    """Create the async engine, applying pool and timeout options the driver understands."""
    url = make_url(config.url)
    kwargs: dict = {"echo": config.echo}

    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_pre_ping=True,
        )
    if url.get_driver_name() == "asyncpg":
        kwargs["connect_args"] = {
            "timeout": config.connect_timeout,
            "command_timeout": config.command_timeout,
        }

    return create_async_engine(url, **kwargs)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
