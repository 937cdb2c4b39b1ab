"""
API routes for the booking service

- Booking creation and lifecycle
- Center responses to booking days
- Center schedules
- Health checks
"""

from .booking_days import router as booking_days_router
from .bookings import router as bookings_router
from .centers import router as centers_router
from .health import router as health_router

__all__ = [
    "bookings_router",
    "booking_days_router",
    "centers_router",
    "health_router"
]

ROUTERS = [
    bookings_router,
    booking_days_router,
    centers_router,
    health_router
]
