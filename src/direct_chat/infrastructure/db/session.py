"""Async engine and session factory for the chat database."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from direct_chat.config import Settings, settings

logger = logging.getLogger(__name__)


def build_engine(cfg: Settings) -> AsyncEngine:
    # asyncpg connects lazily, so building the engine does not touch the database
    return create_async_engine(
        cfg.database_url,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=cfg.DB_POOL_SIZE,
        max_overflow=cfg.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=cfg.DB_POOL_RECYCLE,
        echo=cfg.DB_ECHO,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # entities are mapped out of the session before commit returns, nothing
    # is read lazily afterwards
    return async_sessionmaker(bind=bind, class_=AsyncSession, autoflush=False, expire_on_commit=False)


engine = build_engine(settings)
AsyncSessionLocal = build_sessionmaker(engine)


async def create_schema(bind: AsyncEngine = engine) -> None:
    """Create the users, messages and outbox tables if they are missing."""
    from direct_chat.infrastructure.db.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


async def ping(bind: AsyncEngine = engine) -> None:
    async with bind.connect() as conn:
        await conn.exec_driver_sql("SELECT 1")


async def dispose_engine(bind: AsyncEngine = engine) -> None:
    await bind.dispose()
