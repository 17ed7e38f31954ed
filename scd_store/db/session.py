"""SQLAlchemy async session setup for the SCD store.

Provides:
- Base: DeclarativeBase callers may use for their versioned ORM models
- create_engine_from_settings: async engine with the configured isolation level
- get_engine / get_session_factory: lazily built, process-wide
- get_async_session: session generator with Unit-of-Work commit/rollback
"""

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from scd_store.config.settings import Environment, Settings, get_settings


class Base(DeclarativeBase):
    """Base class for versioned ORM models."""

    pass


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create an async engine applying ISOLATION_LEVEL to every connection."""
    return create_async_engine(
        settings.DATABASE_URL,
        echo=(settings.ENVIRONMENT == Environment.DEV
              and settings.LOG_LEVEL == "DEBUG"),
        pool_pre_ping=True,
        isolation_level=settings.ISOLATION_LEVEL.value,
    )


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return create_engine_from_settings(get_settings())


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: a written record's assigned version stays
    # readable after commit without a lazy load.
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session with Unit-of-Work semantics.

    Writes inside the unit of work run in SAVEPOINTs.
    Commit happens once at the end of a successful block.
    Rollback happens on any exception.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
