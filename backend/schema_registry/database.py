"""Async SQLAlchemy engine and session factory.

Usage:
    database = Database(settings)
    async with database.session() as db:
        result = await db.execute(select(SchemaRecord))
        return result.scalars().all()
"""
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.schema import CreateSchema

from schema_registry.config import Settings
from schema_registry.models import Base

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the pooled async engine described by `settings`."""
    kwargs: dict[str, Any] = {"echo": settings.DB_ECHO}

    # SQLite doesn't support pool settings
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )

    return create_async_engine(settings.DATABASE_URL, **kwargs)


def create_schema_ddl(schema: str) -> CreateSchema:
    """CREATE SCHEMA IF NOT EXISTS, with the name quoted by the dialect."""
    return CreateSchema(schema, if_not_exists=True)


class Database:
    """Owns the engine and hands out short-lived sessions."""

    def __init__(self, settings: Settings, engine: AsyncEngine | None = None):
        self.settings = settings
        self.engine = engine or build_engine(settings)
        self._bind = self.engine
        if settings.DB_SCHEMA:
            self._bind = self.engine.execution_options(
                schema_translate_map={None: settings.DB_SCHEMA}
            )
        self._session_factory = async_sessionmaker(
            self._bind, class_=AsyncSession, expire_on_commit=False
        )

    def session(self) -> AsyncSession:
        return self._session_factory()

    async def create_all(self) -> None:
        """Create the registry table (and its enum type) if missing."""
        async with self._bind.begin() as conn:
            if self.settings.DB_SCHEMA and not self.settings.is_sqlite:
                await conn.execute(create_schema_ddl(self.settings.DB_SCHEMA))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Registry tables ensured")

    async def ping(self) -> None:
        async with self._bind.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
