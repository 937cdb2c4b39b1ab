"""
Core booking engine components

Contains:
- Calendar resolution (1=Monday .. 7=Sunday)
- Availability oracle with the capacity extension point
- Assignment optimizer
- Booking lifecycle rules
"""

from .availability import (
    AdvisoryCapacityPolicy,
    AvailabilityMatrix,
    CapacityPolicy,
    compute_availability,
    is_center_available,
)
from .calendar import iso_weekday, parse_date, resolve_dates, weekday_from_sunday_zero
from .lifecycle import (
    check_booking_transition,
    check_day_response,
    parse_booking_status,
    parse_day_response,
    suggest_booking_status,
)
from .optimizer import AssignmentOptimizer, stable_center_order

__all__ = [
    "AdvisoryCapacityPolicy",
    "AvailabilityMatrix",
    "CapacityPolicy",
    "compute_availability",
    "is_center_available",
    "iso_weekday",
    "parse_date",
    "resolve_dates",
    "weekday_from_sunday_zero",
    "check_booking_transition",
    "check_day_response",
    "parse_booking_status",
    "parse_day_response",
    "suggest_booking_status",
    "AssignmentOptimizer",
    "stable_center_order",
]
