import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from abuse_guard.api import register_routers
from abuse_guard.api.middleware import ApiKeyMiddleware, InspectionMiddleware
from abuse_guard.ioc import get_async_container
from abuse_guard.services.logging import setup_logging
from abuse_guard.settings import Config, get_config

logger = logging.getLogger(__name__)

DASHBOARD_PREFIX = "/dashboard"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    from abuse_guard.database.base import Base

    # Import models so Base.metadata knows about them
    import abuse_guard.api.modules.inspection.models  # noqa: F401

    container: AsyncContainer = app.state.dishka_container
    engine = await container.get(AsyncEngine)

    logger.info("Creating database tables...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError):
        logger.exception("Could not create database tables, decision logs will fail")

    logger.info("Starting application...")
    yield
    logger.info("Shutting down application...")
    await container.close()


def create_app(config: Config, container: AsyncContainer) -> FastAPI:
    app = FastAPI(
        title=config.api.title,
        version=config.api.version,
        lifespan=lifespan,
    )

    if config.inspection.enabled:
        app.add_middleware(
            InspectionMiddleware,
            exempt_paths=config.inspection.exempt_paths,
        )

    if config.api.api_key:
        app.add_middleware(
            ApiKeyMiddleware,
            api_key=config.api.api_key,
            protected_prefix=DASHBOARD_PREFIX,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.allowed_hosts,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    )

    api_router = APIRouter()
    register_routers(api_router)
    app.include_router(api_router)

    setup_dishka(container, app)

    return app


def get_production_app() -> FastAPI:
    """Get the FastAPI application instance."""
    config = get_config()
    setup_logging(config.env)
    return create_app(config, get_async_container())
