from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from pathlib import Path

import anyio
from alembic import command
from alembic.config import Config
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"

settings = get_settings()
# Long-running process: pooled connections are pinged before use.
engine = create_async_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def migrations_url(config: Settings) -> str:
    """URL for Alembic: the direct connection when one is configured."""
    return config.direct_database_url or config.database_url


def build_alembic_config(config: Settings) -> Config:
    alembic_config = Config(str(ALEMBIC_INI))
    alembic_config.set_main_option("sqlalchemy.url", migrations_url(config))
    return alembic_config


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency providing an async database session."""
    async with SessionLocal() as session:
        yield session


async def init_db() -> None:
    """Bring the ledger schema up to date when AUTO_RUN_MIGRATIONS is set."""
    if not settings.auto_run_migrations:
        logger.info("AUTO_RUN_MIGRATIONS disabled; skipping Alembic upgrade on startup.")
        return
    await anyio.to_thread.run_sync(command.upgrade, build_alembic_config(settings), "head")
    logger.info("Ledger schema migrated to head.")


async def dispose_db() -> None:
    await engine.dispose()
    logger.info("Database connections closed.")
