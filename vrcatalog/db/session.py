"""
Database session management for async SQLAlchemy.

This is the catalog's record store. PostgreSQL is the default, with a SQLite
fallback for development. One session spans one request, so every operation
commits or rolls back as a unit.
"""

import logging
import os
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vrcatalog.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Use DATABASE_URL when set explicitly, otherwise fall back to SQLite for dev
_env_database_url = os.environ.get("DATABASE_URL")

if _env_database_url:
    _active_database_url = _env_database_url
    _using_sqlite_fallback = False
elif settings.USE_SQLITE_FALLBACK:
    _active_database_url = settings.SQLITE_FALLBACK_URL
    _using_sqlite_fallback = True
    logger.warning(
        f"DATABASE_URL not set, using SQLite fallback: {settings.SQLITE_FALLBACK_URL}"
    )
else:
    _active_database_url = settings.DATABASE_URL
    _using_sqlite_fallback = False


def create_engine_for_url(url: str, echo: bool = False):
    """Create an async engine with the pool settings suited to the backend."""
    if "sqlite" in url:
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

        # SQLite does NOT enforce foreign keys by default.
        # Enable them on every connection so ON DELETE CASCADE works.
        # The driver's own transaction handling is switched off and BEGIN is
        # emitted explicitly, otherwise SAVEPOINT does not nest.
        @event.listens_for(sqlite_engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(sqlite_engine.sync_engine, "begin")
        def _begin_sqlite_transaction(conn):
            conn.exec_driver_sql("BEGIN")

        return sqlite_engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


engine = create_engine_for_url(_active_database_url, echo=settings.DEBUG)


def is_using_sqlite_fallback() -> bool:
    """Check if we're using the SQLite development fallback."""
    return _using_sqlite_fallback


# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.
    Commits when the request succeeds and rolls back on any error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
