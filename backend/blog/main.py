"""
Blog Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn blog.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  RequestID → Logging → Session → MethodOverride     │
    │                                                     │
    │  Routes:                                            │
    │  /, /posts...  │  /users...  │  /login  │  /health  │
    │                                                     │
    │  Exception Handlers:                                │
    │  auth / lookup / 404 errors → notice + 303 redirect │
    │  DatabaseError, anything else → 500                 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log readiness
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from blog import __version__
from blog.config import settings
from blog.context import flash
from blog.database import dispose_engine
from blog.exceptions import (
    BlogError,
    DatabaseError,
    EntityNotFoundError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    NotAuthorizedError,
    RouteNotFoundError,
    ValidationFailedError,
)
from blog.middleware.logging import RequestLoggingMiddleware
from blog.middleware.method_override import MethodOverrideMiddleware
from blog.middleware.request_id import RequestIDMiddleware, request_id_var
from blog.routes import health, posts, sessions, users
from blog.schemas.view import ErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup (before any other initialization).
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Blog backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: with the default secret the app still works locally,
        # it just can't be trusted with real sessions
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blog backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def redirect_with_notice(request: Request, exc: BlogError) -> RedirectResponse:
    """Flashes exc.message as an error notice and redirects to exc.redirect_to."""
    flash(request, "error", exc.message)
    return RedirectResponse(url=exc.redirect_to or "/posts", status_code=303)


def error_response(
    status_code: int, error: str, message: str, details: Optional[dict] = None
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=request_id_var.get("") or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to responses.

    Handler hierarchy:
        NotAuthenticatedError   → notice + 303 to referrer or /login
        NotAuthorizedError      → notice + 303 to /posts
        EntityNotFoundError     → notice + 303 to /posts
        404 / 405 from router   → notice + 303 to /posts
        ValidationFailedError   → 422 (routes normally re-render the form first)
        InvalidCredentialsError → 401 (likewise)
        DatabaseError           → 500, generic message
        Exception (fallback)    → 500, generic message, stack trace logged

    Security: responses NEVER expose internal details (stack traces, SQL).
    """

    @app.exception_handler(NotAuthenticatedError)
    async def handle_not_authenticated(request: Request, exc: NotAuthenticatedError):
        logger.info("[%s] Login required for %s", request_id_var.get(""), request.url.path)
        return redirect_with_notice(request, exc)

    @app.exception_handler(NotAuthorizedError)
    async def handle_not_authorized(request: Request, exc: NotAuthorizedError):
        logger.warning("[%s] Not authorized: %s", request_id_var.get(""), exc.message)
        return redirect_with_notice(request, exc)

    @app.exception_handler(EntityNotFoundError)
    async def handle_entity_not_found(request: Request, exc: EntityNotFoundError):
        return redirect_with_notice(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unmatched paths and methods redirect to the listing; other HTTP errors pass through."""
        if exc.status_code in (404, 405):
            return redirect_with_notice(request, RouteNotFoundError(path=request.url.path))
        return await http_exception_handler(request, exc)

    @app.exception_handler(ValidationFailedError)
    async def handle_validation_failed(request: Request, exc: ValidationFailedError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return error_response(
            422, "validation_error", exc.message, details={"errors": exc.errors}
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return error_response(401, "invalid_credentials", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests call this for a fresh app per test and override get_db_session.
    """
    app = FastAPI(
        title="Blog API",
        description=(
            "Minimal blog backend: users register and log in, posts are public, "
            "and only a post's author may edit or delete it."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,     # The session cookie must cross origins
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(MethodOverrideMiddleware)

    # Signed cookie session; session["id"] holds the logged-in user's id
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(posts.router)
    app.include_router(users.router)
    app.include_router(sessions.router)
    app.include_router(health.router)

    return app


# uvicorn expects `blog.main:app` to be importable
app = create_app()
