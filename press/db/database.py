"""
Async PostgreSQL engine and the unit-of-work used by every request.

Routes never commit on their own. A request borrows one session from
``get_session``; the pipeline's repository calls flush into it and the
whole request commits (or rolls back) when the dependency unwinds.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger
from time import perf_counter

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from press.configs import file_logger, settings

logger = file_logger(getLogger(__name__))

STATEMENT_TIMEOUT_MS = 30000
SLOW_STATEMENT_MS = 500


def _log_slow_statements(engine: AsyncEngine, threshold_ms: int = SLOW_STATEMENT_MS) -> None:
    """Warn about statements that run longer than ``threshold_ms``."""

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def started(conn, cursor, statement, parameters, context, executemany) -> None:  # noqa: ANN001
        conn.info.setdefault("started_at", []).append(perf_counter())

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def finished(conn, cursor, statement, parameters, context, executemany) -> None:  # noqa: ANN001
        elapsed_ms = (perf_counter() - conn.info["started_at"].pop()) * 1000
        if elapsed_ms >= threshold_ms:
            logger.warning(f"Slow statement ({elapsed_ms:.0f} ms): {statement.splitlines()[0]}")


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create the asyncpg-backed engine.

    The server-side statement and lock timeouts keep a stuck slug lookup
    or post write from holding a pooled connection forever.
    """
    built = create_async_engine(
        url,
        echo=echo,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_timeout=settings.POOL_TIMEOUT,
        pool_recycle=settings.POOL_RECYCLE,
        pool_pre_ping=True,
        connect_args={
            "command_timeout": STATEMENT_TIMEOUT_MS / 1000,
            "server_settings": {
                "application_name": settings.APP_NAME,
                "statement_timeout": str(STATEMENT_TIMEOUT_MS),
                "lock_timeout": str(STATEMENT_TIMEOUT_MS),
            },
        },
    )
    if settings.DEBUG:
        _log_slow_statements(built)
    return built


engine: AsyncEngine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

async_session_maker: async_sessionmaker[SQLModelAsyncSession] = async_sessionmaker(
    engine,
    class_=SQLModelAsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def transaction() -> AsyncGenerator[AsyncSession]:
    """
    Open a session that commits on clean exit and rolls back otherwise.

    Example:
        ```python
        async with transaction() as session:
            session.add(UserDB(name="Ana", email="ana@example.com"))
        ```
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except BaseException as exc:
            await session.rollback()
            logger.info(f"Rolled back transaction after {type(exc).__name__}")
            raise


async def get_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency: one transaction per request."""
    async with transaction() as session:
        yield session


async def init_db() -> None:
    """Create missing tables. Deployed databases are migrated with Alembic."""
    from press.models import PostDB, UserDB  # noqa: F401, PLC0415

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Posts and users tables are ready")


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
