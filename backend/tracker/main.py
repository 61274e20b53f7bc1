"""
Behavior Tracker Backend: FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan builds the single DatabaseClient and disposes it on shutdown.
Who:   Run by uvicorn (`uvicorn tracker.main:app`).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routers (/api):                                         │
    │    auth · organizations · students · profiles ·          │
    │    behavior-categories · behavior-logs      + /health    │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400 │ Auth→401 │ NotFound→404 │            │
    │    Conflict→409   │ Database→500 │ anything else→500     │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → production config checks → engine + DatabaseClient
              on app.state.db (skipped when a test already placed one)
    Shutdown: dispose the engine's pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

import tracker.models  # noqa: F401  (registers every table on Base.metadata)
from tracker import __version__
from tracker.config import settings
from tracker.database import DatabaseClient, create_engine_from_settings
from tracker.exceptions import DatabaseError, TrackerError, ValidationError
from tracker.middleware.logging import RequestLoggingMiddleware
from tracker.middleware.request_id import RequestIDMiddleware, request_id_var
from tracker.routes import (
    auth,
    behavior_categories,
    behavior_logs,
    health,
    organizations,
    profiles,
    students,
)
from tracker.validation.engine import format_error_details

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once, to stdout.

    Format: 2024-05-01T09:30:00 [INFO] tracker.routes.students: Created student ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # Third-party libraries are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Behavior Tracker backend %s starting (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        raise

    owns_client = getattr(app.state, "db", None) is None
    if owns_client:
        app.state.db = DatabaseClient(create_engine_from_settings(settings))
    logger.info("Server ready on port %d", settings.port)

    yield

    logger.info("Behavior Tracker backend shutting down...")
    if owns_client:
        await app.state.db.dispose()
        app.state.db = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(
    status_code: int,
    error: str,
    message: str,
    validation_errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "statusCode": status_code,
        "request_id": request_id_var.get(""),
    }
    if validation_errors is not None:
        body["validation_errors"] = validation_errors
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exceptions to `{success: false, error, message, statusCode, request_id}`.

    Handler resolution follows the class hierarchy, so the TrackerError
    handler covers DomainError, AuthenticationError, NotFoundError and
    ConflictError through their `status_code` / `error_code` attributes.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation failed: %s", request_id_var.get(""), exc.errors)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.error_code, exc.message, exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [error.as_dict() for error in format_error_details(exc.errors())]
        return JSONResponse(
            status_code=400,
            content=error_body(400, "validation_error", "Validation failed", errors),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        body = error_body(exc.status_code, exc.error_code, exc.message)
        if not settings.is_production and exc.context.get("detail"):
            body["detail"] = exc.context["detail"]
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(TrackerError)
    async def handle_tracker_error(request: Request, exc: TrackerError):
        log_level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(log_level, "[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.error_code, exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(500, "internal_error", "An unexpected error occurred"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Behavior Tracker API",
        description="Students, behavior logs, organizations and profiles for behavior tracking.",
        version=__version__,
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(organizations.router)
    app.include_router(students.router)
    app.include_router(profiles.router)
    app.include_router(behavior_categories.router)
    app.include_router(behavior_logs.router)

    return app


app = create_app()
