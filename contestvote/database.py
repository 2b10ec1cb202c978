"""Database connection and session management."""
import logging
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.engine.url import make_url
from contestvote.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every SQLite connection of the engine."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _engine_kwargs() -> dict:
    """Build engine options for the configured database."""
    kwargs = {
        "echo": False,
        "future": True,
        "pool_pre_ping": True,  # Verify connections before use
    }

    drivername = make_url(settings.database_url).drivername
    if drivername.startswith("sqlite"):
        return kwargs

    connect_args = {}
    if settings.environment == "production":
        connect_args["ssl"] = "require"
        logger.debug("SSL connection enabled (ssl=require)")

    kwargs.update(
        connect_args=connect_args,
        pool_recycle=3600,  # Recycle connections every hour
        pool_size=max(1, settings.db_pool_size),
        max_overflow=max(0, settings.db_max_overflow),
    )
    return kwargs


try:
    engine = create_async_engine(settings.database_url, **_engine_kwargs())
    enable_sqlite_foreign_keys(engine)
    logger.debug("Database engine created successfully")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}")
    raise

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


# Dependency for FastAPI
async def get_db():
    """FastAPI dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
