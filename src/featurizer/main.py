# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Featurizer - FastAPI Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from featurizer import __version__
from featurizer.api.limiter import limiter
from featurizer.api.v1.router import router as api_router
from featurizer.bootstrap import bootstrap_catalog, load_manifest
from featurizer.config import get_settings
from featurizer.errors import FeaturizerError
from featurizer.logging_config import clear_context, configure_logging, get_logger
from featurizer.services.feature_service import FeatureService
from featurizer.services.overrides import settings_override
from featurizer.stores.backends import create_backend

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging()

    backend = create_backend(settings)
    await backend.startup()
    app.state.backend = backend
    app.state.override = settings_override(settings)
    logger.info(
        "Starting Featurizer",
        version=__version__,
        store_backend=backend.name,
        kill_switch=settings.kill_switch,
    )

    if settings.catalog_manifest:
        keys = load_manifest(settings.catalog_manifest)
        async with backend.unit_of_work() as uow:
            await bootstrap_catalog(FeatureService(uow.catalog), keys)

    yield

    logger.info("Shutting down Featurizer")
    await backend.shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Featurizer",
        description="Hierarchical feature-flag control plane for multi-tenant deployments",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.middleware("http")
    async def reset_log_context(request: Request, call_next):
        clear_context()
        return await call_next(request)

    @app.exception_handler(FeaturizerError)
    async def featurizer_error_handler(request: Request, exc: FeaturizerError):
        """Render typed failures with their mapped status code."""
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": None,
                    "suggestion": None,
                }
            },
        )

    @app.get("/health", tags=["health"], summary="Health check")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "service": get_settings().app_name,
        }

    @app.get("/", tags=["root"], summary="API root")
    async def root():
        """Root endpoint with API info."""
        return {
            "service": "Featurizer",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(api_router)
    return app


app = create_app()
