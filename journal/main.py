"""
Memory Journal Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       lifespan() owns startup and shutdown.
Who:   uvicorn journal.main:app

Application Architecture:
    ┌───────────────────────────────────────────────────────────────┐
    │                        FastAPI App                            │
    │                                                               │
    │  Middleware:  Rate Limit → Request ID → Logging → GZip → CORS │
    │                                                               │
    │  Routes:      /api/groups  /api/posts  /api/comments          │
    │               /api/image   /uploads    /api/createOneYearBadge│
    │               /health      /docs                              │
    │                                                               │
    │  Background:  AnniversaryScheduler (daily at local midnight)  │
    │                                                               │
    │  Errors:      every handler answers {"message": ...}          │
    └───────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → optional create_all → storage dir → scheduler
    Shutdown: scheduler → database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from journal import __version__
from journal.config import settings
from journal.database import create_tables, dispose_engine
from journal.exceptions import (
    MSG_BAD_REQUEST,
    MSG_NOT_FOUND,
    MSG_SERVER_ERROR,
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    JournalError,
    NotFoundError,
    PasswordMismatchError,
    RateLimitExceededError,
    ValidationError,
)
from journal.middleware.logging import RequestLoggingMiddleware
from journal.middleware.rate_limit import RateLimitMiddleware
from journal.middleware.request_id import RequestIDMiddleware, request_id_var
from journal.routes import badges, comments, groups, health, images, posts
from journal.services.scheduler import anniversary_scheduler

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure the root logger once, before anything else logs."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Memory Journal backend %s starting up...", __version__)

    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Database tables ensured (CREATE_TABLES_ON_STARTUP)")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    if settings.scheduler_enabled:
        anniversary_scheduler.start()
    else:
        logger.info("Anniversary scheduler disabled (SCHEDULER_ENABLED=false)")

    logger.info("Server ready at http://%s:%d (docs at /docs)", settings.backend_host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Memory Journal backend shutting down...")
    anniversary_scheduler.shutdown()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _message(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to {"message": ...} responses.

        ValidationError, RequestValidationError → 400
        PasswordMismatchError                   → 401
        ForbiddenError                          → 403
        NotFoundError                           → 404
        RateLimitExceededError                  → 429
        FileStorageError, DatabaseError,
        SQLAlchemyError, Exception              → 500

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return _message(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Missing body fields, malformed UUIDs, unknown sortBy values
        logger.warning(
            "[%s] Request validation failed on %s %s: %s",
            request_id_var.get(""), request.method, request.url.path, exc.errors(),
        )
        return _message(400, MSG_BAD_REQUEST)

    @app.exception_handler(PasswordMismatchError)
    async def handle_password_mismatch(request: Request, exc: PasswordMismatchError):
        logger.info("[%s] Password check failed: %s", request_id_var.get(""), exc.context)
        return _message(401, exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.info("[%s] Forbidden: %s", request_id_var.get(""), exc.context)
        return _message(403, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.info("[%s] Not found: %s", request_id_var.get(""), exc.context)
        return _message(404, exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _message(429, exc.message, headers={"Retry-After": str(exc.retry_after)})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown routes and wrong methods
        message = MSG_NOT_FOUND if exc.status_code == 404 else str(exc.detail)
        return _message(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _message(500, MSG_SERVER_ERROR)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _message(500, MSG_SERVER_ERROR)

    @app.exception_handler(JournalError)
    async def handle_journal_error(request: Request, exc: JournalError):
        logger.error("[%s] Unhandled application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _message(500, MSG_SERVER_ERROR)

    @app.exception_handler(SQLAlchemyError)
    async def handle_sqlalchemy_error(request: Request, exc: SQLAlchemyError):
        logger.error("[%s] Database error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _message(500, MSG_SERVER_ERROR)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _message(500, MSG_SERVER_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Memory Journal API",
        description=(
            "Group memory journal: public or private groups collect memories, "
            "comments and likes, and earn badges for engagement milestones."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition: RateLimit executes first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins != "*",
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(groups.router)
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(images.router)
    app.include_router(badges.router)
    app.include_router(health.router)

    return app


app = create_app()
