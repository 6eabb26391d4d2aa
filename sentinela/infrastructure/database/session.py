"""Database session management."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)

from sentinela.core.config import settings
from sentinela.core.logging import get_logger
from sentinela.infrastructure.database.models import Base

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Create the async engine on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_MAX_OVERFLOW,
            pool_timeout=settings.POSTGRES_POOL_TIMEOUT
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Create the async session factory on first use."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _session_factory


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Yields:
        AsyncSession: Database session

    Example:
        ```python
        async with get_db_session() as session:
            await session.execute(query)
            await session.commit()
        ```
    """
    session = get_session_factory()()
    logger.debug("Creating new database session")
    try:
        yield session
    except Exception as e:
        logger.error(
            "Database session error",
            error=str(e),
            exc_info=True
        )
        await session.rollback()
        raise
    finally:
        logger.debug("Closing database session")
        await session.close()


async def init_models() -> None:
    """Create the pgvector extension and all tables if they are missing."""
    async with get_engine().begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def dispose_engine() -> None:
    """Close all pooled connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
