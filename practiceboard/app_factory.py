"""
FastAPI application factory.

Builds the assessment API and manages the store and change feed through the
application lifespan.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.asyncio import Redis

from practiceboard.core.config import Settings, get_settings
from practiceboard.core.logging_config import setup_logging
from practiceboard.domain.repositories import IAssessmentStore, IChangeFeed
from practiceboard.domain.utils.datetime_utils import Clock, now_utc
from practiceboard.infrastructure.persistence.sqlalchemy.database import (
    create_session_factory,
    init_schema,
)
from practiceboard.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyAssessmentStore,
)
from practiceboard.infrastructure.realtime import InMemoryChangeFeed, RedisChangeFeed
from practiceboard.presentation.api.exception_handlers import register_exception_handlers
from practiceboard.presentation.api.v1.api_router import api_v1_router

logger = logging.getLogger(__name__)


async def create_change_feed(settings: Settings) -> IChangeFeed:
    """
    Build the change feed selected by ``REALTIME_BACKEND``.

    A Redis connection failure is fatal outside the test environment; tests
    fall back to the in-process feed.
    """
    if settings.REALTIME_BACKEND == "memory":
        logger.info("Using in-process change feed")
        return InMemoryChangeFeed()

    redis_client = Redis.from_url(settings.REDIS_URL)
    try:
        await redis_client.ping()
    except Exception as e:
        await redis_client.aclose()
        logger.error(f"Failed to connect to Redis at {settings.REDIS_URL}: {e}")
        if settings.ENVIRONMENT == "test":
            logger.warning("Test environment detected. Using in-process change feed instead.")
            return InMemoryChangeFeed()
        raise RuntimeError(
            f"Critical dependency failure: Could not connect to Redis at {settings.REDIS_URL}"
        ) from e

    logger.info("Redis change feed connected")
    return RedisChangeFeed(redis_client)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Create the change feed and assessment store on startup and release them
    on shutdown. Anything already placed on ``app.state`` is left alone.
    """
    settings: Settings = fastapi_app.state.settings
    owned_feed: IChangeFeed | None = None
    db_engine = None

    try:
        if getattr(fastapi_app.state, "change_feed", None) is None:
            owned_feed = await create_change_feed(settings)
            fastapi_app.state.change_feed = owned_feed

        if getattr(fastapi_app.state, "assessment_store", None) is None:
            db_engine, session_factory = create_session_factory(
                settings.ASYNC_DATABASE_URL or settings.DATABASE_URL,
                echo=settings.DB_ECHO_LOG,
            )
            await init_schema(db_engine)
            fastapi_app.state.db_engine = db_engine
            fastapi_app.state.assessment_store = SQLAlchemyAssessmentStore(
                session_factory,
                change_feed=fastapi_app.state.change_feed,
                recursion_markers=settings.RECURSION_ERROR_MARKERS,
            )

        logger.info("Application startup complete")
        yield
    finally:
        logger.info("Application is shutting down")
        if owned_feed is not None:
            await owned_feed.close()
        if db_engine is not None:
            await db_engine.dispose()
            logger.info("Database engine disposed")


def create_application(
    settings_override: Settings | None = None,
    store_override: IAssessmentStore | None = None,
    change_feed_override: IChangeFeed | None = None,
    clock: Clock = now_utc,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings_override: Settings to use instead of the cached environment settings
        store_override: Assessment store to use instead of the SQLAlchemy store
        change_feed_override: Change feed to use instead of the configured backend
        clock: Clock used for status timestamps and derived expiry

    Returns:
        Configured FastAPI application instance
    """
    settings = settings_override or get_settings()
    setup_logging(level=settings.LOG_LEVEL)
    logger.info(f"Creating application for environment: {settings.ENVIRONMENT}")

    app_instance = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )
    app_instance.state.settings = settings
    app_instance.state.clock = clock
    app_instance.state.change_feed = change_feed_override
    app_instance.state.assessment_store = store_override

    register_exception_handlers(app_instance)
    app_instance.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app_instance.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    return app_instance
