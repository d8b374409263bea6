"""
FastAPI application entry point.

This module creates and configures the gateway application.
Using an application factory pattern (create_app function) because:
- Settings and the object store are built once, before the server
  accepts connections, and passed to handlers explicitly
- Tests create apps with their own settings and an in-memory store

For local development:
    STORAGE_MOCK_MODE=true uvicorn s3gateway.main:create_app --factory --reload

For production:
    s3gateway --bucket my-bucket --port 8080
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import AuthenticationRequired
from .api.routes import objects
from .config.settings import Settings, get_settings
from .core.auth import challenge_header
from .infrastructure.storage.client import ObjectStore, StorageConfig, create_object_store

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "s3gateway"


def configure_logging(settings: Settings) -> None:
    """
    Configure root logging from settings.

    Verbose diagnostics are logged at INFO, so --verbose lowers the
    package logger to INFO even when LOG_LEVEL is stricter.
    """
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if settings.verbose and package_logger.getEffectiveLevel() > logging.INFO:
        package_logger.setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs startup state and checks configuration. The object store was
    already built by create_app, so nothing is opened or closed here.
    """
    settings: Settings = app.state.settings

    logger.info(
        "S3 gateway starting",
        extra={
            "version": __version__,
            "bucket": settings.bucket,
            "prefix": settings.prefix,
            "auth_required": settings.requires_auth,
            "mock_mode": settings.storage_mock_mode,
        }
    )

    # A missing bucket is not fatal; every fetch will just 404
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration: %s",
            ", ".join(missing_fields),
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("S3 gateway shutting down")


def build_object_store(settings: Settings) -> ObjectStore:
    """Create the object store described by settings."""
    config = StorageConfig(
        bucket_name=settings.bucket,
        region=settings.region,
        endpoint_url=settings.endpoint_url,
    )
    store = create_object_store(config=config, mock_mode=settings.storage_mock_mode)

    if settings.verbose:
        logger.info("s3 bucket: %s", settings.bucket)

    return store


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ObjectStore] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Gateway settings (defaults to the cached environment settings)
        store: Object store to serve from (defaults to one built from settings)

    Raises:
        StorageError: if the object store can't be constructed, e.g. no
            credentials are available
    """
    if settings is None:
        settings = get_settings()

    if store is None:
        store = build_object_store(settings)

    app = FastAPI(
        title="S3 Gateway",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # Read-only for the lifetime of the app
    app.state.settings = settings
    app.state.object_store = store

    # Every path belongs to the bucket, so this is the only router
    app.include_router(objects.router)

    @app.exception_handler(AuthenticationRequired)
    async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
        """Challenge the client for Basic credentials with an empty body."""
        return Response(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers=challenge_header(exc.realm),
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        We log the full error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    logger.debug(
        "FastAPI application created",
        extra={"bucket": settings.bucket, "store": type(store).__name__}
    )

    return app
