"""
NoteStash Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn notestash.main:app).

Lifecycle:
    Startup:
    1. Configure logging
    2. Create the key-value table if missing (auto_create_schema)
    3. Log startup complete

    Shutdown:
    1. Dispose the database engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notestash import __version__
from notestash.config import settings
from notestash.database import dispose_engine, init_schema
from notestash.exceptions import (
    AlreadyExistsError,
    AuthenticationRequiredError,
    DatabaseError,
    InvalidCredentialsError,
    NoteStashError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
    ValidationError,
)
from notestash.middleware.logging import RequestLoggingMiddleware
from notestash.middleware.request_id import RequestIDMiddleware, request_id_var
from notestash.routes import auth, health, notes, stats

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] notestash.services.note_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("NoteStash Backend %s starting up...", __version__)

    if settings.auto_create_schema:
        await init_schema()
        logger.info("Key-value table '%s' ready", settings.table_name)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NoteStash Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Client-facing errors: message and context are safe to return
CLIENT_ERRORS: Dict[Type[NoteStashError], tuple] = {
    ValidationError: (400, "validation_error"),
    AuthenticationRequiredError: (401, "authentication_required"),
    InvalidCredentialsError: (401, "invalid_credentials"),
    PermissionDeniedError: (403, "forbidden"),
    NotFoundError: (404, "not_found"),
    AlreadyExistsError: (409, "already_exists"),
}


def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

        ValidationError              → 400
        AuthenticationRequiredError  → 401
        InvalidCredentialsError      → 401
        PermissionDeniedError        → 403
        NotFoundError                → 404
        AlreadyExistsError           → 409
        StoreUnavailableError        → 503 + Retry-After
        DatabaseError / other custom → 500 (generic message)
        Exception (fallback)         → 500 (generic message, stack logged)
    """

    async def handle_client_error(request: Request, exc: NoteStashError):
        status_code, code = CLIENT_ERRORS[type(exc)]
        logger.warning("[%s] %s: %s", request_id_var.get(""), code, exc.message)
        return JSONResponse(
            status_code=status_code,
            content=_error_body(code, exc.message, exc.context),
        )

    for exc_class in CLIENT_ERRORS:
        app.add_exception_handler(exc_class, handle_client_error)

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error("[%s] Store unavailable | Context: %s", request_id_var.get(""), exc.context)
        return JSONResponse(
            status_code=503,
            content=_error_body("service_unavailable", exc.message),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(NoteStashError)
    async def handle_app_error(request: Request, exc: NoteStashError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NoteStash API",
        description=(
            "Multi-user notes with categories, priorities and statistics, "
            "stored in a single partition/sort-key table."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(stats.router)
    app.include_router(health.router)

    return app


app = create_app()
