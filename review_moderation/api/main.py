"""Review Moderation API — FastAPI application over the review core."""
from __future__ import annotations

import logging

from review_moderation.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from config.settings import settings
from review_moderation import __version__
from review_moderation.api.moderation import router as moderation_router
from review_moderation.api.products import router as products_router
from review_moderation.api.reviews import router as reviews_router
from review_moderation.db.engine import dispose_sync_engine, engine, get_sync_engine
from review_moderation.db.tables import Base
from review_moderation.errors import (
    ForbiddenError,
    NotFoundError,
    ReviewSystemError,
    StorageError,
    ValidationError,
)
from review_moderation.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger(__name__)

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        send_default_pii=False,
    )

# Error kind → HTTP status. Checked in order, most specific first.
ERROR_STATUS = (
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (StorageError, 503),
)


def status_for(exc: ReviewSystemError) -> int:
    for kind, status in ERROR_STATUS:
        if isinstance(exc, kind):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate settings and create tables on startup."""
    from review_moderation.startup_checks import validate_settings
    validate_settings()

    if settings.STORE_BACKEND == "sync":
        Base.metadata.create_all(get_sync_engine())
    else:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready (store backend: %s)", settings.STORE_BACKEND)

    yield

    logger.info("Shutting down — draining connections...")
    dispose_sync_engine()
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Review Moderation API",
    version=__version__,
    description="Product reviews with a moderation workflow, audit trail and statistics",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID tracing
app.add_middleware(RequestIDMiddleware)

app.include_router(reviews_router)
app.include_router(products_router)
app.include_router(moderation_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__, "store_backend": settings.STORE_BACKEND}


@app.exception_handler(ReviewSystemError)
async def review_error_handler(request: Request, exc: ReviewSystemError):
    """Translate core error kinds into the error envelope."""
    status = status_for(exc)
    if status >= 500:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        message = "The review store is temporarily unavailable. Please retry."
    else:
        message = str(exc)
    return JSONResponse(status_code=status, content={"error": exc.code, "message": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = " → ".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return JSONResponse(status_code=422, content={
        "error": "validation_error",
        "message": "Invalid request data",
        "details": errors,
    })


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    """Consistent error envelope for all HTTP errors."""
    return JSONResponse(status_code=exc.status_code, content={
        "error": exc.detail if isinstance(exc.detail, str) else "error",
        "message": exc.detail,
    })


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions — never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
    })
