"""Database engine and session management."""

from collections.abc import AsyncGenerator
from functools import cache
from logging import getLogger

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from app.configs import file_logger, settings
from app.errors import ConfigurationError, DatabaseConnectionError

logger = file_logger(getLogger(__name__))

STATEMENT_TIMEOUT_MS = 30000


def _configure_engine_events(engine: AsyncEngine) -> None:
    """Configure connection pool events for monitoring."""

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection: object, connection_record: object) -> None:
        logger.debug("New database connection established")

    @event.listens_for(engine.sync_engine, "checkin")
    def on_checkin(dbapi_connection: object, connection_record: object) -> None:
        logger.debug("Connection returned to pool")


@cache
def get_engine() -> AsyncEngine:
    """
    Create the process-wide async engine on first use.

    Raises:
        ConfigurationError: If ``DATABASE_URL`` is not set.
    """
    if not settings.DATABASE_URL:
        raise ConfigurationError(missing=["DATABASE_URL"])

    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_timeout=settings.POOL_TIMEOUT,
        pool_recycle=settings.POOL_RECYCLE,
        pool_pre_ping=True,
        connect_args={
            "command_timeout": STATEMENT_TIMEOUT_MS / 1000,
            "server_settings": {
                "statement_timeout": str(STATEMENT_TIMEOUT_MS),
                "lock_timeout": str(STATEMENT_TIMEOUT_MS),
            },
        },
    )
    if settings.DEBUG:
        _configure_engine_events(engine)
    return engine


@cache
def get_session_maker() -> async_sessionmaker[SQLModelAsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def get_session() -> AsyncGenerator[AsyncSession]:
    """
    Dependency for getting async database sessions.

    One session per request: committed when the handler returns, rolled
    back when it raises.

    Yields:
        AsyncSession: Database session
    """
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Transaction error")
            raise
        finally:
            await session.close()


async def check_connection() -> None:
    """
    Open a connection and run a trivial query.

    Raises:
        DatabaseConnectionError: If the database cannot be reached.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        raise DatabaseConnectionError(f"Failed to connect to the database: {e}") from e
    logger.info("Database connection established")


async def close_db() -> None:
    """Dispose the engine and forget the cached engine and session factory."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        logger.info("Database connections closed")
    get_session_maker.cache_clear()
    get_engine.cache_clear()
