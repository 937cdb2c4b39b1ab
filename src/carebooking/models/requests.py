"""Request models for the booking API."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class IntelligentBookingRequest(BaseModel):
    """Structured booking request; dates are validated by the calendar resolver."""
    guardian_id: UUID = Field(..., description="Guardian placing the booking")
    request_date: Optional[str] = Field(None, description="Single ISO date (YYYY-MM-DD)")
    request_dates: Optional[List[str]] = Field(None, description="ISO dates; takes precedence over request_date")
    dependent_name: Optional[str] = Field(None, description="Case-insensitive part of the child's name")
    center_name: Optional[str] = Field(None, description="Case-insensitive part of a preferred center's name")


class ManualBookingDay(BaseModel):
    date: str
    center_id: Optional[UUID] = None


class ManualBookingRequest(BaseModel):
    """Booking with explicitly chosen days and centers."""
    guardian_id: UUID
    dependent_id: UUID
    booking_days: List[ManualBookingDay] = Field(default_factory=list)


# Status values are plain strings so that out-of-range values reach the
# lifecycle checks and come back as 400 instead of a schema error.
class BookingStatusUpdate(BaseModel):
    status: str


class BookingDayResponse(BaseModel):
    status: str
