"""
Async engine and session factory for the data room tables.

Postgres (asyncpg) in deployments; SQLite (aiosqlite) when testing.
"""

import os
from typing import Any, Dict

from sqlalchemy.orm import declarative_base
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.DEBUG}
    if os.getenv("TESTING") == "1" or database_url.startswith("sqlite"):
        return options
    options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)
    return options


async_engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()


async def create_tables():
    """Create the chunk, file metadata and association tables if missing"""
    from .. import models  # noqa: F401  registers tables on Base

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
