"""Result models for assignment and booking operations."""

from collections import Counter
from datetime import date
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .base import Booking, BookingStatus, Center


class AssignmentStrategy(str, Enum):
    """How the optimizer reached its assignment."""
    PREFERRED = "preferred"
    SINGLE_CENTER = "single_center"
    GREEDY = "greedy"


class AssignmentResult(BaseModel):
    """Outcome of the assignment optimizer."""
    assignments: Dict[date, UUID] = Field(default_factory=dict)
    unassignable_dates: List[date] = Field(default_factory=list)
    strategy: Optional[AssignmentStrategy] = None

    @property
    def success(self) -> bool:
        return not self.unassignable_dates

    @property
    def centers_used(self) -> int:
        return len(set(self.assignments.values()))


class AssignmentSummary(BaseModel):
    total_days: int
    centers_used: int
    center_breakdown: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_assignments(
        cls,
        assignments: Dict[date, UUID],
        centers: Dict[UUID, Center]
    ) -> "AssignmentSummary":
        breakdown = Counter(centers[center_id].name for center_id in assignments.values())
        return cls(
            total_days=len(assignments),
            centers_used=len(set(assignments.values())),
            center_breakdown=dict(sorted(breakdown.items()))
        )


class BookingDetail(Booking):
    """Booking as returned by the API."""
    suggested_status: Optional[BookingStatus] = None
    assignment_summary: Optional[AssignmentSummary] = None


class CenterSchedule(BaseModel):
    """Public view of a center's weekly schedule."""
    id: UUID
    name: str
    zip_code: str
    daily_capacity: int
    operating_days: List[int] = Field(default_factory=list)

    @classmethod
    def from_center(cls, center: Center) -> "CenterSchedule":
        return cls(
            id=center.id,
            name=center.name,
            zip_code=center.zip_code,
            daily_capacity=center.daily_capacity,
            operating_days=center.sorted_operating_days()
        )
