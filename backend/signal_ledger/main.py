"""
PURPOSE: Main FastAPI application factory and lifecycle management for Signal Ledger.

Initializes the FastAPI application with:
- The webhook and event API routers
- CORS middleware and slowapi rate limiting
- Exception handlers mapping service errors to JSON error bodies
- Startup events (logging, event store initialization)
- Shutdown events (event store teardown)
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from signal_ledger.api import api_router
from signal_ledger.config.constants import INTERNAL_ERROR_MESSAGE
from signal_ledger.config.settings import Settings, settings
from signal_ledger.core.exceptions import EventValidationError, InitializationError, StorageError
from signal_ledger.core.rate_limit import limiter
from signal_ledger.services.event_service import EventService
from signal_ledger.storage import EventStore, create_event_store
from signal_ledger.utils.logger import get_logger, setup_logging
from signal_ledger.version import get_version


logger = get_logger(__name__)


# ════════════════════════════════════════════════════════════════
# Lifecycle Events
# ════════════════════════════════════════════════════════════════


async def on_startup(app: FastAPI) -> None:
    """
    PURPOSE: Prepare the event store before the server accepts requests.

    CALLED BY: FastAPI lifespan startup

    Tasks:
        1. Setup logging with configured level
        2. Initialize the event store (create data file or table)

    Raises:
        InitializationError: If the store cannot be prepared. Startup is
            aborted and the server never begins listening.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.LOG_LEVEL)
    logger.info(
        "application_startup_starting",
        version=app.version,
        storage_backend=app_settings.STORAGE_BACKEND.value,
        schema_variant=app_settings.SCHEMA_VARIANT.value,
    )

    store: EventStore = app.state.event_service.store
    try:
        await store.initialize()
    except InitializationError as e:
        logger.critical("application_startup_failed", error=str(e))
        await store.close()
        raise

    logger.info("application_startup_complete")


async def on_shutdown(app: FastAPI) -> None:
    """
    PURPOSE: Release the event store's resources (connection pool).

    CALLED BY: FastAPI lifespan shutdown
    """
    logger.info("application_shutdown_starting")
    await app.state.event_service.store.close()
    logger.info("application_shutdown_complete")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    PURPOSE: Manage application lifespan with startup and shutdown events.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    await on_startup(app)

    yield

    await on_shutdown(app)


# ════════════════════════════════════════════════════════════════
# Exception Handlers
# ════════════════════════════════════════════════════════════════


async def validation_exception_handler(
    request: Request,
    exc: EventValidationError
) -> JSONResponse:
    """
    PURPOSE: Report a rejected webhook payload as HTTP 400 with its reason.

    Returns:
        JSONResponse: {"error": <reason>}
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": exc.reason},
    )


async def storage_exception_handler(
    request: Request,
    exc: StorageError
) -> JSONResponse:
    """
    PURPOSE: Report a storage failure as an opaque HTTP 500.

    The underlying message is only included when EXPOSE_ERROR_DETAILS is on.

    Returns:
        JSONResponse: {"error": "Internal server error"[, "details": ...]}
    """
    logger.error(
        "storage_request_failed",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    content = {"error": INTERNAL_ERROR_MESSAGE}
    if request.app.state.settings.EXPOSE_ERROR_DETAILS:
        content["details"] = str(exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    PURPOSE: Handle unexpected exceptions with logging and safe error response.

    Returns:
        JSONResponse: Safe error response without exposing internals
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exception_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


# ════════════════════════════════════════════════════════════════
# FastAPI Application Factory
# ════════════════════════════════════════════════════════════════


def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[EventStore] = None,
) -> FastAPI:
    """
    PURPOSE: Create and configure the FastAPI application.

    CALLED BY: Module import (uvicorn entrypoint) and the test suite

    Args:
        app_settings: Settings to use; defaults to the module singleton.
        store: Event store to serve; defaults to the one STORAGE_BACKEND selects.

    Returns:
        FastAPI: Configured application; the store is initialized on startup.
    """
    app_settings = app_settings or settings
    store = store or create_event_store(app_settings)

    version = get_version().get("version", "unknown")

    app = FastAPI(
        title="Signal Ledger",
        description="Trading-signal webhook ingestion and query service",
        version=version,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.event_service = EventService(store)

    # ────────────────────────────────────────────────────────────
    # Middleware
    # ────────────────────────────────────────────────────────────

    limiter.enabled = app_settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # ────────────────────────────────────────────────────────────
    # Routes
    # ────────────────────────────────────────────────────────────

    app.include_router(api_router)

    @app.get("/", tags=["root"])
    async def root():
        """
        PURPOSE: Root endpoint for API availability check.

        Returns:
            dict: Service information, version and storage configuration
        """
        return {
            "status": "ok",
            "service": "Signal Ledger",
            "version": version,
            "storage_backend": app_settings.STORAGE_BACKEND.value,
            "schema_variant": app_settings.SCHEMA_VARIANT.value,
        }

    # ────────────────────────────────────────────────────────────
    # Exception Handlers
    # ────────────────────────────────────────────────────────────

    app.add_exception_handler(EventValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


# Create the application
app = create_app()


if __name__ == "__main__":
    """
    PURPOSE: Run the application with Uvicorn.

    Usage:
        python -m signal_ledger.main
        OR
        uvicorn signal_ledger.main:app --host 0.0.0.0 --port 3001
    """
    import uvicorn

    logger.info("server_starting", host=settings.HOST, port=settings.PORT)
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
