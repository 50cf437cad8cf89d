"""
TodoMVC — FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routers and the
       lifespan that owns the database pool.
Who:   uvicorn (`uvicorn todomvc.main:app`) and the test suite.

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the Database handle (one pool per process) unless one was injected
    3. Log startup complete

    Shutdown:
    1. Dispose the Database handle if the lifespan created it
    2. Log shutdown complete

Error mapping (plain-text bodies, no structured codes):
    ValidationError / bad query params → 400
    NotFoundError                      → 404
    UnsupportedMediaTypeError          → 415
    DatabaseError                      → 500
    anything else                      → 500
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from todomvc import __version__
from todomvc.config import Settings, settings as default_settings
from todomvc.database import Database
from todomvc.exceptions import (
    DatabaseError,
    NotFoundError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from todomvc.middleware.logging import RequestLoggingMiddleware
from todomvc.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from todomvc.routes import health, tasks

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _text(status_code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(
        message,
        status_code=status_code,
        headers={REQUEST_ID_HEADER: request_id_var.get("")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP statuses.

    Bodies carry the exception's message only. Context dicts are logged,
    never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _text(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in errors
        )
        logger.warning("[%s] Invalid request: %s", request_id_var.get(""), detail)
        return _text(400, f"Invalid request: {detail}")

    @app.exception_handler(UnsupportedMediaTypeError)
    async def handle_unsupported_media_type(request: Request, exc: UnsupportedMediaTypeError):
        return _text(415, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.info("[%s] Not found: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _text(404, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _text(500, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _text(500, "An unexpected error occurred")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Overrides the module-level settings singleton
        database: Pre-built pool handle; the caller keeps ownership of it.
                  When omitted, the lifespan builds one from settings and
                  disposes it on shutdown.
    """
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(cfg.log_level)
        logger.info("TodoMVC backend %s starting up...", __version__)

        owns_database = getattr(app.state, "database", None) is None
        if owns_database:
            app.state.database = Database.from_settings(cfg)
        logger.info("Server ready at http://%s:%d", cfg.backend_host, cfg.backend_port)

        yield

        logger.info("TodoMVC backend shutting down...")
        if owns_database:
            await app.state.database.dispose()
            app.state.database = None
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="TodoMVC API",
        description="Task persistence for a TodoMVC front-end, MessagePack over HTTP.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.database = database

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(tasks.router)
    app.include_router(health.router)

    return app


app = create_app()
