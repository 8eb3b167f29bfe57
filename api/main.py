"""
FastAPI application entry point.

Configures the API with all routes, middleware, and error handling.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from virtualdoc.config import Config, load_config
from virtualdoc.errors import AppError, InternalError
from virtualdoc.services import Services, create_services

from .v1.router import router as v1_router

logger = logging.getLogger(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    services: Services = app.state.services
    logger.info(
        f"Starting VirtualDoc API ({services.config.environment}), "
        f"chat {'enabled' if services.chat.is_configured() else 'disabled'}"
    )

    yield

    logger.info("Shutting down...")


def create_app(config: Optional[Config] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Services are created once here from the given config and kept on
    ``app.state``; they are read-only for the life of the process.

    Args:
        config: Optional config (loads from env if not provided)
        services: Optional pre-built services container

    Returns:
        Configured FastAPI app
    """
    if services is None:
        services = create_services(config or load_config())

    app = FastAPI(
        title="VirtualDoc API",
        description="Accounts, profiles and medical records for VirtualDoc",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=services.config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        content = {"detail": exc.message}
        if isinstance(exc, InternalError) and exc.__cause__ and services.config.is_development:
            content["error"] = str(exc.__cause__)
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=headers
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        content = {"detail": "Internal server error"}
        if services.config.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    # Health check
    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "virtualdoc-api"}

    # Root endpoint
    @app.get("/", tags=["System"])
    async def root():
        """API root endpoint."""
        return {
            "name": "VirtualDoc API",
            "version": API_VERSION,
            "docs": "/docs"
        }

    # Include API v1 routes
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()
