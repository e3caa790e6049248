"""
SQLAlchemy database access module.

Creates the async engine and session factory for the assessment store.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from practiceboard.infrastructure.persistence.sqlalchemy.models import Base

logger = logging.getLogger(__name__)


def create_session_factory(
    database_url: str, echo: bool = False
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create an async engine and a session factory bound to it.

    Args:
        database_url: Async SQLAlchemy URL, e.g. ``sqlite+aiosqlite:///./practiceboard.db``
        echo: Whether to echo SQL statements

    Returns:
        Tuple of (engine, session factory)
    """
    engine_kwargs: dict = {"echo": echo, "future": True}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(database_url, **engine_kwargs)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    logger.info(f"AsyncEngine created for dialect {engine.dialect.name}")
    return engine, session_factory


async def init_schema(engine: AsyncEngine) -> None:
    """Create all assessment store tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Assessment store schema ensured")
