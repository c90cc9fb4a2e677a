"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, docmanager.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docmanager import __version__
from docmanager.api.deps.dependencies import get_service_cache
from docmanager.boundary.db.create_tables import create_all_tables
from docmanager.configs import get_settings
from docmanager.observability.logger import configure_logging
from docmanager.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import health_router, ingestion_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup: optional table creation, job manager warm-up, optional stale-job
    sweeper. Shutdown: drain background dispatches and release connections.
    """
    settings = get_settings()
    cache = get_service_cache()

    if settings.database.create_tables_on_startup:
        await create_all_tables(cache.engine)

    _ = cache.ingestion_manager
    if settings.ingestion.stale_sweep_enabled:
        cache.sweeper.start()
    logger.info("Ingestion job manager ready", extra={"environment": settings.environment})

    yield

    await cache.aclose()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="Document Management Ingestion API",
        description="Ingestion job lifecycle for the document management backend",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Outermost middleware binds the correlation id before request logging runs
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(ingestion_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "docmanager.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
