"""
Inkwell Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database handle and the SessionManager, puts
       them on app.state, registers middleware, exception handlers and the
       route table, and returns the app.
Who:   uvicorn (`uvicorn inkwell.main:app`) and the test suite, which builds
       its own app bound to an in-memory database.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Logging → Timeout         │
    │                                                     │
    │  Routes (API_PREFIX):                               │
    │    /posts  /posts/{id}  /users/{id}  /auth/session  │
    │  Routes (root): /health                             │
    │                                                     │
    │  Exception Handlers:                                │
    │    400 invalid input   401 session   403 ownership  │
    │    404 missing   409 conflict   500 everything else │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkwell import __version__
from inkwell.auth.session import SessionManager
from inkwell.config import Settings, settings as default_settings
from inkwell.database import Database
from inkwell.exceptions import InkwellError
from inkwell.middleware.logging import RequestLoggingMiddleware
from inkwell.middleware.request_id import RequestIDMiddleware, request_id_var
from inkwell.middleware.timeout import RequestTimeoutMiddleware
from inkwell.routes import health
from inkwell.routes.table import build_router
from inkwell.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] inkwell.services.post_service: message
    Output: stdout (captured by Docker / the process manager)
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from these libraries is not useful at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging and configuration check. Shutdown: close the pool."""
    config: Settings = app.state.settings

    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Inkwell Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Keep serving: local development runs on the defaults on purpose
        logger.warning("Configuration warning: %s", str(e))

    logger.info("API mounted at '%s'", config.api_prefix or "/")
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("API docs: http://%s:%d/docs", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Inkwell Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(message: str, code: Optional[str]) -> dict:
    return ErrorResponse(
        error=message,
        code=code,
        request_id=request_id_var.get("") or None,
    ).model_dump(by_alias=True, exclude_none=True)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses. Every body has the shape
    {"error": <message>, "code": <machine code>, "requestId": <id>}.

    Handler hierarchy:
        InkwellError subclasses   → their own status_code (400/401/403/404/409/500)
        RequestValidationError    → 400 (malformed JSON or wrong field types)
        HTTPException             → its status (unknown route, wrong method)
        Exception (fallback)      → 500

    Security: 5xx responses carry a generic message only. Context dicts and
    tracebacks go to the log.
    """

    @app.exception_handler(InkwellError)
    async def handle_inkwell_error(request: Request, exc: InkwellError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.code),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            detail = first.get("msg", "invalid value")
            message = f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"
        logger.info("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content=_error_body(message, "invalid_input"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail), None),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("An unexpected error occurred", "internal_error"),
        )


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
        settings: configuration; defaults to the environment-driven `settings`
        database: an existing Database handle; by default one is created from
                  `settings.database_url`. The app disposes it on shutdown.
    """
    config = settings or default_settings

    app = FastAPI(
        title="Inkwell API",
        description="Blog posts and authors with ownership-checked editing.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = database or Database(config)
    app.state.session_manager = SessionManager(config)

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestTimeoutMiddleware, timeout=config.request_timeout_seconds)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(build_router(prefix=config.api_prefix))
    app.include_router(health.router)

    return app


app = create_app()
