"""Shared pytest fixtures for the SCD store test suite.

Provides:
- db_engine: in-memory SQLite async engine with all test tables
- db_session: plain async session (write() owns its transaction)
- user_scd / product_scd: repositories bound to db_session
- seed_users: inserts raw UserSCD versions, bypassing write()
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from scd_store.db.session import Base
from scd_store.repositories.scd import SCDRepository
from scd_models import PRODUCT_TABLE, USER_TABLE, UserSCD


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(
        bind=db_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def user_scd(db_session) -> SCDRepository:
    return SCDRepository(db_session, USER_TABLE)


@pytest.fixture
def product_scd(db_session) -> SCDRepository:
    return SCDRepository(db_session, PRODUCT_TABLE)


@pytest.fixture
def seed_users(db_session):
    """Insert explicit (user_id, version, ...) rows and commit."""

    async def _seed(*rows: UserSCD) -> None:
        db_session.add_all(rows)
        await db_session.commit()

    return _seed
