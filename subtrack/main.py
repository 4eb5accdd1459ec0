"""
SubTrack Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error rendering
       and storage lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn subtrack.main:app) or the `subtrack` script.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                     FastAPI App                         │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────────────┐ ┌─────────────────┐                   │
    │  │  Request ID  │→│  Access Logging │                   │
    │  └──────────────┘ └─────────────────┘                   │
    │                                                         │
    │  Routes:                                                │
    │  ┌──────────────────────────┐ ┌─────────────┐           │
    │  │ /subscription[s] (CRUD)  │ │ GET /health │           │
    │  └──────────────────────────┘ └─────────────┘           │
    │                                                         │
    │  Exception Handlers:                                    │
    │  ┌───────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Exists→409 │ →500 │  │
    │  └───────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration for the active env (fail fast)
    3. Build the storage backend (PostgreSQL: retried first connection)
    4. Publish it as app.state.storage

    Shutdown:
    1. Close the storage (dispose engine, release pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from subtrack import __version__
from subtrack.config import settings
from subtrack.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    StorageError,
    SubTrackError,
    ValidationError,
)
from subtrack.middleware.logging import RequestLoggingMiddleware
from subtrack.middleware.request_id import RequestIDMiddleware, request_id_var
from subtrack.routes import health, subscriptions
from subtrack.schemas.subscription import STATUS_ERROR
from subtrack.storage import build_storage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before any other initialization.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout
    (Docker captures stdout). Level comes from settings.log_level.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the storage on startup and close it on shutdown.

    Configuration and connection failures abort startup: without storage
    there is nothing this service can answer.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SubTrack Backend %s starting up (env=%s)...", __version__, settings.env)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    try:
        storage = await build_storage(settings)
    except StorageError as e:
        logger.error("Failed to initialize storage: %s | Context: %s", e.message, e.context)
        raise

    app.state.storage = storage
    logger.info("Storage backend: %s", storage.name)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SubTrack Backend shutting down...")
    await storage.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, message: str) -> JSONResponse:
    """The error envelope: {"status": "Error", "error": message}."""
    return JSONResponse(
        status_code=status_code,
        content={"status": STATUS_ERROR, "error": message},
    )


def describe_request_error(exc: RequestValidationError) -> str:
    """
    Translate FastAPI's decoding errors into the API's messages.

        missing body                → "empty request"
        bad limit / offset query    → "invalid limit format" / "invalid offset format"
        anything else in the body   → "failed to decode request"
    """
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        if len(loc) >= 2 and loc[0] == "query" and loc[1] in ("limit", "offset"):
            return f"invalid {loc[1]} format"
        if loc == ("body",) and err.get("type") == "missing":
            return "empty request"
    return "failed to decode request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the error envelope.

    Handler hierarchy:
        ValidationError          → 400 Bad Request
        RequestValidationError   → 400 Bad Request (decoding problems)
        NotFoundError            → 404 Not Found
        AlreadyExistsError       → 409 Conflict
        StorageError             → 500 Internal Server Error
        SubTrackError (base)     → 500 Internal Server Error
        HTTPException            → its own status ("requested API endpoint not found" on 404)
        Exception (fallback)     → 500 "internal server error"

    Context dicts are logged server-side only, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s (%s)", rid, exc.message, exc.kind.value)
        return error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = describe_request_error(exc)
        logger.warning("[%s] %s: %s", rid, message, exc.errors())
        return error_response(400, message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.message)

    @app.exception_handler(AlreadyExistsError)
    async def handle_already_exists(request: Request, exc: AlreadyExistsError):
        rid = request_id_var.get("")
        logger.warning("[%s] Conflict: %s", rid, exc.message)
        return error_response(409, exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(500, exc.message)

    @app.exception_handler(SubTrackError)
    async def handle_subtrack_error(request: Request, exc: SubTrackError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(500, "internal server error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "requested API endpoint not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side ONLY."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(500, "internal server error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests build the app through this factory and set app.state.storage
    themselves; the lifespan is not run by httpx's ASGITransport.
    """
    app = FastAPI(
        title="SubTrack API",
        description=(
            "CRUD service for user subscriptions with monthly periods and "
            "total-cost aggregation over a period window."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(subscriptions.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app on the configured host and port."""
    uvicorn.run(
        "subtrack.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `subtrack.main:app` to be importable
app = create_app()
