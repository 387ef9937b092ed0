"""
Main FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lightsurvey import __version__
from lightsurvey.api.error_handlers import register_error_handlers
from lightsurvey.api.kmz import router as kmz_router
from lightsurvey.api.middleware import RequestCorrelationMiddleware
from lightsurvey.api.route_recordings import router as route_recordings_router
from lightsurvey.core.config import settings
from lightsurvey.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for FastAPI application.

    Configures logging on startup and closes the KMZ download client on
    shutdown.
    """
    log_file = None
    if settings.environment == "production":
        log_file = settings.recordings_dir.parent / "logs" / "lightsurvey.log"

    setup_logging(
        log_level="DEBUG" if settings.environment == "development" else "INFO",
        log_file=log_file,
        json_logs=(settings.environment == "production"),
        enable_console=True,
    )
    logger.info(f"Starting Lightsurvey API v{__version__} in {settings.environment} mode")

    yield

    logger.info("Shutting down Lightsurvey API")
    service = getattr(app.state, "kmz_service", None)
    if service is not None:
        await service.close()


app = FastAPI(
    title="Lightsurvey API",
    description="KMZ parsing and route recording for street-lighting surveys",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestCorrelationMiddleware)

register_error_handlers(app)

app.include_router(kmz_router, prefix=settings.api_v1_prefix)
app.include_router(route_recordings_router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root() -> dict[str, str]:
    """
    Root endpoint returning API information.

    Returns:
        dict[str, str]: API information including name and version.
    """
    return {
        "name": "Lightsurvey API",
        "version": __version__,
        "description": "KMZ parsing and route recording for street-lighting surveys",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        dict[str, str]: Health status.
    """
    return {"status": "healthy"}
