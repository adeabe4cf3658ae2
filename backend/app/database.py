"""Database handle, declarative base, and the per-request session dependency.

The engine is not a module global: `Database` is built once at startup
(see `app.main.lifespan`), stored on `app.state.db`, and disposed on
shutdown. A missing handle means the API runs without a backing store
and every DB-backed endpoint answers 503.

  - Base          → declarative base for every table
  - Database      → engine + session factory with explicit lifecycle
  - get_db()      → FastAPI dependency, one transaction per request
"""

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.middleware.exceptions import UnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str, echo: bool) -> dict:
    """Dialect-specific engine options for SQLite vs PostgreSQL."""
    kwargs: dict = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_size"] = 10
        kwargs["max_overflow"] = 10
    return kwargs


class Database:
    """Owns the connection pool for one application instance."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **_engine_kwargs(url, echo))
        self.async_session = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_all(self) -> None:
        """Create missing tables (development convenience; Alembic in production)."""
        import app.models  # noqa: F401  registers every table on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database pool closed")


# ── Session dependency ──────────────────────────────────────

def get_database(request: Request) -> Database:
    """Return the app's Database handle or raise 503 when none is configured."""
    db: Database | None = getattr(request.app.state, "db", None)
    if db is None:
        raise UnavailableError("Database not available")
    return db


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a session; commit on success, roll back on any error."""
    database = get_database(request)
    async with database.async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
