"""
FastAPI application for the adaptive tutor service.

Provides REST API for:
- Progress logging (attempts, graded assessments)
- Mastery estimation
- Next topic recommendation and learning paths
- Learning gap reports
- Velocity and time-to-mastery predictions
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, get_settings
from src.api.routers import adaptive_router
from src.curriculum import CurriculumError
from src.db.database import get_engine, init_db

settings = get_settings()


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and optionally a rotating file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention=5)


def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings)
    logger.info("Starting adaptive tutor service...")
    init_db()
    try:
        curriculum = adaptive_router.get_curriculum()
    except CurriculumError as e:
        logger.error(f"Invalid curriculum configuration: {e}")
        raise
    logger.info(
        f"Service started on {settings.api_host}:{settings.api_port} "
        f"({len(curriculum)} curriculum topics)"
    )

    yield

    # Shutdown
    logger.info("Shutting down adaptive tutor service...")


app = FastAPI(
    title="Adaptive Tutor",
    description="""
    Adaptive-learning analytics for the tutoring service.

    ## Features

    - **Mastery**: 0-100 mastery per topic from attempt history
    - **Next Topic**: Prerequisite-gated recommendation
    - **Learning Paths**: Phased plans with a daily schedule
    - **Gap Reports**: Severity-ranked gaps from graded assessments
    - **Velocity**: Topics mastered per week and days-to-mastery

    ## Data Flow

    ```
    Attempts / Assessments (progress store)
        ↓
    Mastery Estimator
        ↓
    Topic Selector / Difficulty / Velocity / Path Generator / Gap Analyzer
    ```
    """,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "adaptive-tutor",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round-trip."""
    db_status, db_error = _check_database_health()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "components": {
            "database": db_status,
            "curriculum": "configured" if settings.has_curriculum_configured() else "not_configured",
        },
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


@app.get("/config", tags=["Health"])
def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive)."""
    return {
        "database_url": settings.database_url.split("@")[-1]
        if "@" in settings.database_url
        else "configured",
        "curriculum_path": settings.curriculum_path,
        "thresholds": {
            "mastery": settings.mastery_threshold,
            "in_progress_floor": settings.in_progress_floor,
            "gap": settings.gap_threshold,
        },
        "scheduling": {
            "default_timeframe_days": settings.default_timeframe_days,
            "default_daily_minutes": settings.default_daily_minutes,
            "velocity_window_weeks": settings.velocity_window_weeks,
            "max_prediction_days": settings.max_prediction_days,
        },
    }


app.include_router(adaptive_router.router, prefix="/api/adaptive", tags=["Adaptive Learning"])
