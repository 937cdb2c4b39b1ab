"""Base models for the booking service."""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Set
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BookingStatus(str, Enum):
    """Aggregate status of a booking."""
    DRAFT = "DRAFT"          # Just persisted
    PENDING = "PENDING"      # Submitted for center responses
    PARTIAL = "PARTIAL"      # Some days accepted, some declined
    CONFIRMED = "CONFIRMED"  # All days accepted
    CANCELLED = "CANCELLED"


class BookingDayStatus(str, Enum):
    """A center's response to one booked day."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class Guardian(BaseModel):
    """Account holder who books care on behalf of dependents."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    zip_code: str
    created_at: Optional[datetime] = None


class Dependent(BaseModel):
    """A child on whose behalf care is booked."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    guardian_id: UUID
    name: str
    birth_date: Optional[date] = None
    created_at: Optional[datetime] = None


class ScheduleException(BaseModel):
    """Date-specific override of a center's weekly pattern."""
    is_closed: bool = False
    # Recorded but not used to gate availability; see CapacityPolicy
    capacity_override: Optional[int] = Field(None, ge=0)


class Center(BaseModel):
    """Childcare provider with a weekly operating pattern and date exceptions."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    daily_capacity: int = Field(0, ge=0)  # advisory only
    zip_code: str
    operating_days: Set[int] = Field(default_factory=set)  # 1=Monday .. 7=Sunday
    exceptions: Dict[date, ScheduleException] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @field_validator("operating_days")
    @classmethod
    def validate_operating_days(cls, value: Set[int]) -> Set[int]:
        invalid = sorted(day for day in value if not 1 <= day <= 7)
        if invalid:
            raise ValueError(f"Operating days must be 1 (Monday) to 7 (Sunday), got {invalid}")
        return value

    def exception_for(self, day: date) -> Optional[ScheduleException]:
        return self.exceptions.get(day)

    def sorted_operating_days(self) -> List[int]:
        return sorted(self.operating_days)


class BookingDay(BaseModel):
    """One date within a booking, bound to one assigned center."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    date: date
    center_id: Optional[UUID] = None
    status: BookingDayStatus = BookingDayStatus.PENDING
    center_responded_at: Optional[datetime] = None
    center_name: Optional[str] = None


class Booking(BaseModel):
    """A guardian's request for care spanning one or more dates."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    guardian_id: UUID
    dependent_id: UUID
    status: BookingStatus = BookingStatus.DRAFT
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    booking_days: List[BookingDay] = Field(default_factory=list)

    # Denormalized names filled in by detail queries
    guardian_name: Optional[str] = None
    guardian_email: Optional[str] = None
    dependent_name: Optional[str] = None
    dependent_birth_date: Optional[date] = None

    @property
    def day_statuses(self) -> List[BookingDayStatus]:
        return [day.status for day in self.booking_days]
