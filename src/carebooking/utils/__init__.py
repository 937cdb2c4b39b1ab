"""
Utility modules for the booking engine

This package contains:
- Custom exceptions and their HTTP mapping
- Loguru-based logging
"""

from .exceptions import (
    BookingDayNotFound,
    BookingEngineError,
    BookingNotFound,
    CenterNotFound,
    DependentNotFound,
    GuardianNotFound,
    InvalidBookingRequest,
    InvalidDate,
    InvalidStatus,
    InvalidStatusTransition,
    NoCentersInArea,
    NoDependentFound,
    NoMatchingDependent,
    NotFound,
    PartialUnavailability,
    TransactionFailure,
)
from .logger import get_logger

__all__ = [
    "BookingEngineError",
    "NotFound",
    "GuardianNotFound",
    "DependentNotFound",
    "NoDependentFound",
    "NoMatchingDependent",
    "CenterNotFound",
    "NoCentersInArea",
    "BookingNotFound",
    "BookingDayNotFound",
    "InvalidBookingRequest",
    "InvalidDate",
    "InvalidStatus",
    "InvalidStatusTransition",
    "PartialUnavailability",
    "TransactionFailure",
    "get_logger",
]
