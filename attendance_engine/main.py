"""HR Attendance Engine — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from attendance_engine.calendar.router import router as holidays_router
from attendance_engine.common.exceptions import register_exception_handlers
from attendance_engine.common.logging_config import configure_logging
from attendance_engine.common.rate_limit import limiter
from attendance_engine.config import settings
from attendance_engine.database import engine
from attendance_engine.reports.router import router as reports_router
from attendance_engine.schedules.router import router as schedules_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Attendance engine starting (environment=%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="HR Attendance Engine",
        description="Schedule resolution and attendance report aggregation",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    app.include_router(schedules_router, prefix="/api/v1/schedules", tags=["schedules"])
    app.include_router(holidays_router, prefix="/api/v1/holidays", tags=["holidays"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["reports"])

    return app


app = create_app()
