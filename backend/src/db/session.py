"""Async SQLAlchemy engine and session factory, built per application."""
import asyncio
import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for `settings.database_url`. Connects lazily."""
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Yield an async database session from the application's session factory."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def wait_for_database(
    db_engine: AsyncEngine,
    retries: int,
    delay: float,
) -> None:
    """
    Block until the database answers `SELECT 1`, retrying a fixed number of times.

    Raises:
        RuntimeError: If the database is still unreachable after all retries.
    """
    attempts_left = retries
    while True:
        try:
            async with db_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database is operational")
            return
        except (SQLAlchemyError, OSError) as e:
            attempts_left -= 1
            logger.error(
                "Failed to connect to the database. Retries left: %s (%s)",
                attempts_left, e,
            )
            if attempts_left <= 0:
                raise RuntimeError(
                    f"Database unreachable after {retries} attempts",
                ) from e
            logger.info("Retrying database connection in %s seconds", delay)
            await asyncio.sleep(delay)
