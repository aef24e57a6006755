"""PostgreSQL store with async SQLAlchemy.

Handles:
- Engine / session factory construction
- Connectivity checks
- Table creation for development and tests

Engines are built in the app lifespan and passed to stores explicitly.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from xgifts.settings import Settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine (connection pool) for DATABASE_URL."""
    return create_async_engine(
        settings.async_database_url,
        echo=settings.debug,
        connect_args=settings.asyncpg_connect_args,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def ping_db(engine: AsyncEngine) -> None:
    """Run a trivial query to validate connectivity."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables (for development/testing only)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
