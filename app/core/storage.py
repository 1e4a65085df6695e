"""Database connection and storage utilities."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


def create_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine, enabling foreign keys on SQLite."""
    new_engine = create_async_engine(url, echo=False, **kwargs)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory with the project's session defaults."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine: AsyncEngine = create_engine(
    str(settings.database_url),
    pool_pre_ping=True,
)

async_session = create_session_factory(engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    import app.models  # noqa: F401  registers every mapper on Base.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
