"""Async database engine and session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from liftlog.core.config import Settings
from liftlog.db.base import Base


def build_engine(settings: Settings) -> AsyncEngine:
    """Async engine for the local SQLite file."""
    return create_async_engine(settings.async_database_url, echo=settings.debug)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables (dev / tests; Alembic in production)."""
    import liftlog.models  # noqa: F401 - register all models

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
