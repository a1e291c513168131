"""
Postboard Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the engine, session factory and token
       service from one immutable Settings object, stores them on
       `app.state`, then registers middleware, exception handlers and routes.
Who:   uvicorn (`uvicorn postboard.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                        │
    │  Middleware:  Request ID → Logging → GZip → CORS      │
    │  Routes:      /api/users  /api/auth  /api/posts       │
    │               /health                                 │
    │  Errors:      PostboardError → its status/code        │
    │               RequestValidationError → 400            │
    │               Exception → 500 (logged, not leaked)    │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, check settings, create missing tables
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
from sqlalchemy.ext.asyncio import AsyncEngine

from postboard import __version__
from postboard.config import Settings, settings as default_settings
from postboard.database import (
    create_engine,
    create_session_factory,
    create_tables,
    dispose_engine,
)
from postboard.exceptions import PostboardError, ValidationError
from postboard.middleware.logging import RequestLoggingMiddleware
from postboard.middleware.request_id import RequestIDMiddleware, request_id_var
from postboard.routes import auth, health, posts, users
from postboard.services.token_service import TokenService
from postboard.validation import collect_field_errors

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configures the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] postboard.access: GET /api/posts 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("Postboard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so the problem shows up in logs and health checks
        logger.error("Configuration error: %s", str(e))

    if settings.create_tables_on_startup:
        await create_tables(app.state.engine)
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Postboard Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(code: str, message: str, rid: str, **extra) -> dict:
    body = {"error": code, "message": message, "request_id": rid}
    body.update(extra)
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exceptions to JSON error responses.

    Handler hierarchy:
        PostboardError          → exc.status_code / exc.error_code
        RequestValidationError  → 400 validation_error (field list)
        Exception (fallback)    → 500 internal_server_error

    Responses never carry stack traces or exception context; those go to
    the server log only.
    """

    @app.exception_handler(PostboardError)
    async def handle_app_error(request: Request, exc: PostboardError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        extra = {}
        if isinstance(exc, ValidationError):
            extra["errors"] = exc.errors
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, rid, **extra),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Path/query/body problems caught by FastAPI itself before our handlers run."""
        rid = request_id_var.get("")
        errors = collect_field_errors(exc.errors())
        logger.info("[%s] Request validation failed: %s", rid, [e["field"] for e in errors])
        return JSONResponse(
            status_code=400,
            content=_error_body(ValidationError.error_code, "Validation failed", rid, errors=errors),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
                rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-derived settings
        engine:   Pre-built engine (tests pass an in-memory SQLite engine)
    """
    settings = settings or default_settings
    engine = engine or create_engine(settings)

    app = FastAPI(
        title="Postboard API",
        description="Users, token login, and posts with likes and comments.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.token_service = TokenService(
        secret=settings.jwt_secret,
        ttl_seconds=settings.jwt_expires_in,
        algorithm=settings.jwt_algorithm,
    )

    # ── Middleware (last added executes first) ────────────────────────────
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

    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(health.router)

    return app


app = create_app()
