# totp_api/app/db/session.py
"""
Async database session management for SQLAlchemy.

- Uses asyncpg for PostgreSQL
- Uses aiosqlite for SQLite (local development and tests)
- Pool settings differ for SQLite (no pooling) vs PostgreSQL
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from totp_api.app.core.config import settings


def _create_async_engine() -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    SQLite:
    - NullPool, new connection per request
    - check_same_thread=False for async compatibility

    PostgreSQL:
    - AsyncAdaptedQueuePool with pre-ping and periodic recycling
    """
    if settings.is_sqlite:
        return create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        # Validate connection before checkout
        pool_pre_ping=True,
        pool_recycle=300,
    )


engine: AsyncEngine = _create_async_engine()


# expire_on_commit=False: attributes stay readable after commit
# autoflush=False: explicit flush control
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    One session per request; every TOTP operation is a single unit of
    work against it. This does NOT auto-commit: the credential store
    commits explicitly when a registration is complete.

    Yields:
        AsyncSession bound to the configured database
    """
    async with AsyncSessionLocal() as session:
        yield session
