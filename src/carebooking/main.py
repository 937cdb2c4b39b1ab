"""Main FastAPI application for the booking service."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.middleware import LoggingMiddleware
from .api.routes import ROUTERS
from .config import Settings, settings as default_settings
from .database.connection import DatabaseManager
from .utils.exceptions import (
    NOT_FOUND_EXCEPTIONS,
    REQUEST_EXCEPTIONS,
    BookingEngineError,
    create_error_response,
)
from .utils.logger import get_logger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    booking_logger = get_logger()
    booking_logger.log_info(f"Starting {app.title} v{app.version}")

    # A manager injected by the caller (tests, embedding apps) is used as is
    owns_database = getattr(app.state, "db_manager", None) is None
    if owns_database:
        db_manager = DatabaseManager(app.state.settings)
        try:
            await db_manager.initialize(apply_schema=app.state.settings.db_apply_schema)
        except Exception as e:
            booking_logger.log_error(f"Failed to connect to PostgreSQL: {e}", error=e)
            raise
        app.state.db_manager = db_manager
        booking_logger.log_info("PostgreSQL database connected successfully")

    yield

    booking_logger.log_info(f"Shutting down {app.title}")
    if owns_database:
        await app.state.db_manager.close()
        app.state.db_manager = None


async def booking_error_handler(request: Request, exc: BookingEngineError):
    """Turn engine errors into structured responses"""
    if isinstance(exc, NOT_FOUND_EXCEPTIONS + REQUEST_EXCEPTIONS):
        logger.info(f"{exc.error_code}: {exc.message}")
    else:
        logger.error(f"{exc.error_code}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=create_error_response(exc))


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTP {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "status_code": exc.status_code},
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    db_manager: Optional[DatabaseManager] = None
) -> FastAPI:
    """Build the application; ``db_manager`` skips pool creation when given."""
    settings = settings or default_settings
    get_logger(settings)

    app = FastAPI(
        title=settings.app_name,
        description="""
        Assigns requested childcare dates to centers in the guardian's area
        and commits each booking atomically.

        - Availability from weekly operating days and date exceptions
        - Fewest-centers assignment with a greedy fallback
        - Booking and booking-day lifecycle with a suggested status
        """,
        version=settings.app_version or __version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_manager = db_manager

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in ROUTERS:
        app.include_router(router)

    app.add_exception_handler(BookingEngineError, booking_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": app.version,
            "endpoints": {
                "/bookings/intelligent": "Assign dates to centers and create a booking",
                "/bookings": "Create a booking with explicit days, or list bookings",
                "/bookings/{id}": "Booking detail with suggested status",
                "/bookings/{id}/status": "Move a booking through its lifecycle",
                "/bookings/{id}/cancel": "Cancel a booking",
                "/booking-days/{id}/respond": "Center accepts or declines a day",
                "/centers": "Centers and their operating days",
                "/health": "Service and database status",
                "/docs": "Interactive API documentation"
            },
            "features": {
                "capacity_checking": False,
                "assignment": "greedy_min_centers",
                "automatic_status_rollup": False
            }
        }

    return app


def run():
    """Console entry point."""
    uvicorn.run(
        "carebooking.main:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_level="debug" if default_settings.debug else "info",
    )


if __name__ == "__main__":
    run()
