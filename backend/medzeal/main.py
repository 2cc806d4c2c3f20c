"""
MedZeal Backend: FastAPI Application Factory
=============================================

What:  Builds the back-office API: middleware, exception handlers, routers, lifespan.
Who:   uvicorn (uvicorn medzeal.main:app); tests build their own via create_app().

Lifecycle:
    Startup
    1. Configure logging
    2. Report missing configuration (logged, not fatal)
    3. Initialize the Firebase app
    4. Start live subscriptions (vendors, appointments, blogs) when enabled
    5. Create the thumbnail storage directory

    Shutdown
    1. Close live subscriptions
    2. Delete the Firebase app

Error responses:
    {"error": <code>, "message": ..., "details": ..., "request_id": ...}
    except POST /api/send-email failures: {"error": "Error sending email.", "details": ...}
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from medzeal import __version__
from medzeal.config import settings
from medzeal.database import dispose_app, init_firebase, store
from medzeal.exceptions import (
    FetchError,
    FileStorageError,
    MailServiceError,
    MedZealError,
    NotFoundError,
    RateLimitExceededError,
    StoreError,
    ValidationError,
)
from medzeal.middleware.logging import RequestLoggingMiddleware
from medzeal.middleware.rate_limit import RateLimitMiddleware
from medzeal.middleware.request_id import RequestIDMiddleware, request_id_var
from medzeal.routes import (
    appointments,
    blogs,
    catalog,
    credit_cycle,
    email,
    health,
    inventory,
    prescriptions,
    site,
    users,
)
from medzeal.services.subscriptions import live_snapshots

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("MedZeal Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: reads and /health work without SMTP credentials
        logger.error("Configuration error: %s", e)

    firebase_ready = False
    try:
        init_firebase()
        firebase_ready = True
    except Exception as e:
        logger.error("Firebase initialization failed: %s", e, exc_info=True)

    if firebase_ready and settings.enable_live_subscriptions:
        await live_snapshots.start_all(store)
    elif not settings.enable_live_subscriptions:
        logger.info("Live subscriptions disabled; reads use one-shot fetches")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Thumbnail storage: %s", storage.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("MedZeal Backend shutting down...")
    await live_snapshots.close_all()
    dispose_app()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    content = {"error": code, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    ValidationError 400 · NotFoundError 404 · RateLimitExceededError 429
    FetchError 503 · StoreError 500 · FileStorageError 500 · MailServiceError 500
    any other MedZealError / Exception 500 (generic message, trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, "not_found", exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error(
            429, "rate_limit_exceeded", exc.message,
            details={"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(FetchError)
    async def handle_fetch_error(request: Request, exc: FetchError):
        logger.error("[%s] Fetch error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(503, "fetch_error", exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error("[%s] Store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(500, "store_error", exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(500, "server_error", exc.message)

    @app.exception_handler(MailServiceError)
    async def handle_mail_error(request: Request, exc: MailServiceError):
        # The approval page reads exactly these two keys
        logger.error("[%s] Error sending email: %s", request_id_var.get(""), exc.message)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return JSONResponse(
            status_code=500,
            content={"error": "Error sending email.", "details": exc.message},
            headers=headers,
        )

    @app.exception_handler(MedZealError)
    async def handle_app_error(request: Request, exc: MedZealError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return _error(500, "internal_server_error", "An unexpected error occurred. Please try again later.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="MedZeal Back-Office API",
        description=(
            "Clinic back office over the MedZeal realtime database: vendor credit "
            "cycles, inventory, appointments, blogs, prescriptions and confirmation email."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    for module in (
        credit_cycle, inventory, catalog, prescriptions, blogs,
        appointments, users, email, site, health,
    ):
        app.include_router(module.router)

    return app


app = create_app()
