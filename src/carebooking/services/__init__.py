"""Service layer for booking orchestration."""

from .booking_service import BookingService, center_schedules, select_center, select_dependent

__all__ = [
    "BookingService",
    "center_schedules",
    "select_center",
    "select_dependent",
]
