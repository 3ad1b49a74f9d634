"""
Database session configuration.

Production runs PostgreSQL through asyncpg; tests and local runs may point
``DATABASE_URL`` at SQLite via aiosqlite, which takes no pool sizing.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from trip_ledger.app.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` suited to the URL's dialect."""
    options: Dict[str, Any] = {"echo": settings.db_echo}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        return options

    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        # Detect connections the server closed while idle
        pool_pre_ping=True,
    )
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    Anything left uncommitted when the request fails is rolled back before
    the session goes back to the pool.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
