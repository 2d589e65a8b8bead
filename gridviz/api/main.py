"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, gridviz.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gridviz.api import api_router
from gridviz.api.deps.dependencies import get_service_cache
from gridviz.boundary.db.connection import dispose_engine
from gridviz.boundary.db.create_tables import create_all_tables
from gridviz.configs import get_settings
from gridviz.observability.logger import configure_logging
from gridviz.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger("uvicorn")

    # Startup
    if settings.database.create_tables:
        await create_all_tables()
    logger.info(
        "Diagram service started",
        extra={"environment": settings.environment, "ingest_dir": str(settings.storage.ingest_dir)},
    )

    yield

    # Shutdown
    get_service_cache().clear()
    await dispose_engine()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()

    app = FastAPI(
        title="Grid Diagram API",
        description="Network-area, single-line and map diagrams for grid models",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "gridviz.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
