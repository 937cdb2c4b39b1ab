"""Data models for the booking service."""

from .base import (
    Booking,
    BookingDay,
    BookingDayStatus,
    BookingStatus,
    Center,
    Dependent,
    Guardian,
    ScheduleException,
)
from .requests import (
    BookingDayResponse,
    BookingStatusUpdate,
    IntelligentBookingRequest,
    ManualBookingDay,
    ManualBookingRequest,
)
from .results import (
    AssignmentResult,
    AssignmentStrategy,
    AssignmentSummary,
    BookingDetail,
    CenterSchedule,
)

__all__ = [
    "Booking",
    "BookingDay",
    "BookingDayStatus",
    "BookingStatus",
    "Center",
    "Dependent",
    "Guardian",
    "ScheduleException",
    "BookingDayResponse",
    "BookingStatusUpdate",
    "IntelligentBookingRequest",
    "ManualBookingDay",
    "ManualBookingRequest",
    "AssignmentResult",
    "AssignmentStrategy",
    "AssignmentSummary",
    "BookingDetail",
    "CenterSchedule",
]
