"""Async database handle and session dependency."""
import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all models."""


class Database:
    """Owns the engine and session factory for the lifetime of the process.

    Constructed once at startup and attached to ``app.state.database``.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def connect(self, create_tables: bool = False) -> None:
        """Probe the database so startup fails fast when it is unreachable."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                # Import models so they register on Base.metadata
                import app.models  # noqa: F401

                await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connected (tables ensured: %s)", create_tables)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a session bound to the application's database.

    Handlers commit explicitly so writes are visible before the response
    is produced; anything left uncommitted is rolled back on error.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
