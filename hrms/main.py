"""HRMS — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from hrms.attendance.router import router as attendance_router
from hrms.common.exceptions import register_exception_handlers
from hrms.common.rate_limit import limiter
from hrms.config import settings
from hrms.core_hr.router import departments_router, employees_router
from hrms.database import create_tables
from hrms.leave.router import router as leave_router
from hrms.logging_config import setup_logging
from hrms.payroll.router import router as payroll_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    if settings.DB_CREATE_TABLES:
        await create_tables()
        logger.info("Database tables ensured")
    logger.info("HRMS API started (%s)", settings.ENVIRONMENT)
    yield
    logger.info("HRMS API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="HRMS",
        description="Employees, departments, attendance, leave requests and payroll",
        version=VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers ({status, message, data} envelopes)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health", tags=["system"])
    async def health_check():
        return {
            "status": True,
            "message": "healthy",
            "data": {"version": VERSION, "environment": settings.ENVIRONMENT},
        }

    # Register routers
    app.include_router(employees_router, prefix="/api/employees", tags=["employees"])
    app.include_router(departments_router, prefix="/api/departments", tags=["departments"])
    app.include_router(leave_router, prefix="/api/leave-requests", tags=["leave"])
    app.include_router(payroll_router, prefix="/api/payroll", tags=["payroll"])
    app.include_router(attendance_router, prefix="/api/attendance", tags=["attendance"])

    return app


app = create_app()
