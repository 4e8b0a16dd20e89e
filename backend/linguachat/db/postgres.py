"""Async SQLAlchemy engine and session factory.

All database operations use the SQLAlchemy 2.0 async session pattern.
The conversation store opens one session per operation from
``async_session_factory``; request handlers never hold a session themselves.
"""

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from linguachat import models  # noqa: F401  (registers tables on Base.metadata)
from linguachat.core.config import settings
from linguachat.db.base import Base

logger = structlog.get_logger(__name__)


engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables() -> None:
    """Create any missing tables. Production schemas come from alembic/versions."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_ready")


async def close_postgres() -> None:
    """Gracefully dispose of the async engine connection pool."""
    logger.info("postgres_shutdown")
    await engine.dispose()
