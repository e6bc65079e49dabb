# shiftcal/main.py
"""
FastAPI application entry point.
"""

import os
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftcal.core.config import APP_VERSION, SEED_SAMPLE_PATTERN
from shiftcal.core.logging_config import get_logger, setup_logging
from shiftcal.core.request_logging import RequestLoggingMiddleware
from shiftcal.core.schedule import create_default_alarms, create_sample_pattern, reconcile_default_alarms
from shiftcal.core.sentry_config import init_sentry
from shiftcal.core.utils import get_today
from shiftcal.database.database import SessionLocal, create_tables, get_db
from shiftcal.database.repository import ShiftRepository
from shiftcal.routes.alarms import router as alarms_router
from shiftcal.routes.basic_alarms import router as basic_alarms_router
from shiftcal.routes.data import router as data_router
from shiftcal.routes.patterns import router as patterns_router

# Setup logging FIRST (before any other imports that might log)
setup_logging()
logger = get_logger(__name__)

# Initialize Sentry for error tracking (production only)
sentry_enabled = init_sentry()


def prepare_initial_data(repo: ShiftRepository) -> None:
    """
    First start: create the sample pattern with default alarms.

    Later starts: tidy the active pattern's alarms (newest per type kept,
    missing default types added).
    """
    if not repo.list_patterns():
        if not SEED_SAMPLE_PATTERN:
            return
        pattern = repo.save_pattern(create_sample_pattern(get_today()))
        for alarm in create_default_alarms(pattern.id):
            repo.save_alarm(alarm)
        repo.set_active_pattern(pattern.id)
        logger.info("Seeded sample pattern %s", pattern)
        return

    active = repo.get_active_pattern()
    if active is None:
        return

    result = reconcile_default_alarms(repo.list_alarms(active.id), active.id)
    for duplicate in result.removed:
        repo.delete_alarm(duplicate.id)
    for alarm in result.added:
        repo.save_alarm(alarm)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Application starting up",
        extra={
            "extra_fields": {
                "production": os.getenv("PRODUCTION", "false").lower() == "true",
                "python_version": sys.version,
            }
        },
    )

    try:
        create_tables()
        logger.info("Database tables created/verified")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise

    db = SessionLocal()
    try:
        prepare_initial_data(ShiftRepository(db))
    finally:
        db.close()

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="shiftcal",
    description="Shift-cycle alarm scheduling service",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS Configuration
IS_PRODUCTION = os.getenv("PRODUCTION", "false").lower() == "true"
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()]

if IS_PRODUCTION:
    if not CORS_ORIGINS:
        logger.warning("Production mode but no CORS_ORIGINS set. CORS will block all cross-origin requests.")

    allowed_origins = CORS_ORIGINS
    allowed_methods = ["GET", "POST", "PUT", "DELETE"]
    logger.info(f"CORS configured for production with origins: {allowed_origins}")
else:
    allowed_origins = ["*"]
    allowed_methods = ["*"]
    logger.info("CORS configured for development (permissive)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=IS_PRODUCTION,
    allow_methods=allowed_methods,
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(patterns_router)
app.include_router(alarms_router)
app.include_router(basic_alarms_router)
app.include_router(data_router)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Domain rejections (negative horizons, invalid values, broken records) become 400."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/health", tags=["health"])
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for monitoring.

    Returns 200 OK when the database answers, 503 otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed - database connection error: {e}", exc_info=True)
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "service": "shiftcal",
                "database": "disconnected",
            },
        ) from e

    return {
        "status": "healthy",
        "service": "shiftcal",
        "version": APP_VERSION,
        "database": "connected",
    }
