"""Database configuration and async session management."""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings


def configure_sqlite_engine(engine: AsyncEngine, busy_timeout_seconds: float) -> None:
    """
    Make SQLite transactions take the write lock up front.

    pysqlite/aiosqlite defer BEGIN until the first DML statement, so two
    transactions that both read and then write can deadlock on lock upgrade.
    Emitting BEGIN IMMEDIATE ourselves makes concurrent writers queue on the
    busy timeout instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout_seconds * 1000)}")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Args:
        database_url: SQLAlchemy async database URL
        echo: Whether to log emitted SQL

    Returns:
        AsyncEngine: Configured engine
    """
    if not database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    engine_kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in database_url:
        # In-memory databases only exist for the lifetime of one connection
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
    configure_sqlite_engine(engine, settings.sqlite_busy_timeout_seconds)
    return engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used by request handlers and units of work."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
engine = build_engine(settings.database_url, echo=settings.debug)

# Create async session factory
async_session_factory = build_session_factory(engine)

# Create declarative base for models
Base = declarative_base()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function that yields database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Alias for FastAPI dependency injection
get_db = get_async_session


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
