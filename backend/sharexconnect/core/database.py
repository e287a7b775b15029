from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool
from typing import AsyncGenerator, Optional

from sharexconnect.core.config import settings
from sharexconnect.core.logging_config import logger

# Create base class for models (can be defined before engine)
Base = declarative_base()

# Process-scoped pool, created by init_db() and released by close_db()
_engine: Optional[AsyncEngine] = None
_async_session_local: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
    """Get properly formatted database URL"""
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return db_url


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    SQLite ships with foreign key enforcement off. Repository subtrees and
    staged pull request files rely on ON DELETE CASCADE, so turn it on for
    every new connection.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_for_url(db_url: str) -> AsyncEngine:
    """
    Build an engine for the given URL.

    Connection pooling strategy:
    - SQLite: NullPool, foreign keys enabled
    - PostgreSQL Development: NullPool (simpler debugging)
    - PostgreSQL Production: queue pool sized from DB_POOL_* settings
    """
    if "sqlite" in db_url:
        engine = create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    if settings.is_dev_mode():
        return create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            poolclass=NullPool,
        )

    return create_async_engine(
        db_url,
        echo=settings.DB_ECHO,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Verify connections before use
    )


def get_engine() -> AsyncEngine:
    """Return the process engine, creating it on first use"""
    global _engine
    if _engine is None:
        _engine = create_engine_for_url(get_database_url())
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory"""
    global _async_session_local
    if _async_session_local is None:
        _async_session_local = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _async_session_local


def AsyncSessionLocal():
    """Create a new async session"""
    return get_session_local()()


# Dependency to get DB session
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session - only commits if there are pending changes"""
    session_factory = get_session_local()
    async with session_factory() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Create the engine and any missing tables"""
    # Models must be registered on Base.metadata before create_all
    import sharexconnect.models  # noqa: F401

    eng = get_engine()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database initialized ({eng.dialect.name})")


async def close_db():
    """Dispose of the engine and drop the session factory"""
    global _engine, _async_session_local
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_local = None
        logger.info("Database connections closed")
