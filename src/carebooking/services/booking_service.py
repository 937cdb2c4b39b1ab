"""Booking orchestration: from a structured request to a committed booking."""

import logging
import time
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence
from uuid import UUID

from ..core.availability import CapacityPolicy, compute_availability
from ..core.calendar import parse_date, resolve_dates
from ..core.lifecycle import parse_booking_status, parse_day_response, suggest_booking_status
from ..core.optimizer import AssignmentOptimizer, stable_center_order
from ..database.repository import BookingRepository
from ..models.base import Booking, BookingDay, BookingStatus, Center, Dependent
from ..models.requests import IntelligentBookingRequest, ManualBookingRequest
from ..models.results import AssignmentSummary, BookingDetail, CenterSchedule
from ..utils.exceptions import (
    BookingNotFound,
    CenterNotFound,
    DependentNotFound,
    GuardianNotFound,
    InvalidBookingRequest,
    NoCentersInArea,
    NoDependentFound,
    NoMatchingDependent,
    PartialUnavailability,
)
from ..utils.logger import get_logger

logger = logging.getLogger(__name__)


def select_dependent(
    dependents: Sequence[Dependent],
    guardian_id: UUID,
    dependent_name: Optional[str] = None
) -> Dependent:
    """
    Pick the dependent a request is for.

    ``dependents`` must be ordered earliest-created first. Without a name the
    first one is used. With a name, the first case-insensitive substring
    match is used; a name that matches nobody is an error even when other
    dependents exist.
    """
    if not dependents:
        raise NoDependentFound(guardian_id)

    name = (dependent_name or "").strip()
    if not name:
        return dependents[0]

    needle = name.casefold()
    for dependent in dependents:
        if needle in dependent.name.casefold():
            return dependent
    raise NoMatchingDependent(name, guardian_id)


def select_center(centers: Iterable[Center], center_name: str) -> Center:
    """First candidate, in stable order, whose name contains ``center_name``."""
    needle = center_name.strip().casefold()
    for center in stable_center_order(centers):
        if needle in center.name.casefold():
            return center
    raise CenterNotFound(center_name=center_name)


def center_schedules(centers: Iterable[Center]) -> List[dict]:
    """Candidate schedule returned to callers when dates cannot be served."""
    return [
        {
            "id": str(center.id),
            "name": center.name,
            "operating_days": center.sorted_operating_days()
        }
        for center in stable_center_order(centers)
    ]


class BookingService:
    """
    Runs one booking request end to end.

    Constructed per request with the repository it should use; the oracle and
    optimizer are pure so nothing here is shared between requests.
    """

    def __init__(
        self,
        repository: BookingRepository,
        optimizer: Optional[AssignmentOptimizer] = None,
        capacity_policy: Optional[CapacityPolicy] = None,
        today: Optional[Callable[[], date]] = None
    ):
        self.repository = repository
        self.optimizer = optimizer or AssignmentOptimizer()
        self.capacity_policy = capacity_policy
        self.today = today or date.today
        self.booking_logger = get_logger()

    async def create_intelligent_booking(self, request: IntelligentBookingRequest) -> BookingDetail:
        """
        Resolve dates, dependent and centers, assign dates and commit.

        Raises:
            InvalidDate, GuardianNotFound, NoDependentFound, NoMatchingDependent,
            NoCentersInArea, CenterNotFound, PartialUnavailability,
            TransactionFailure
        """
        start_time = time.time()

        dates = resolve_dates(request.request_date, request.request_dates, today=self.today())

        guardian = await self.repository.get_guardian(request.guardian_id)
        if guardian is None:
            raise GuardianNotFound(request.guardian_id)

        dependents = await self.repository.get_dependents(guardian.id)
        dependent = select_dependent(dependents, guardian.id, request.dependent_name)

        centers = await self.repository.get_centers_in_area(guardian.zip_code, dates)
        if not centers:
            raise NoCentersInArea(guardian.zip_code)

        preferred_center_id = None
        if request.center_name and request.center_name.strip():
            preferred_center_id = select_center(centers, request.center_name).id

        matrix = compute_availability(centers, dates, self.capacity_policy)
        result = self.optimizer.assign(matrix, centers, dates, preferred_center_id)

        input_summary = {
            "guardian_id": guardian.id,
            "dates": dates,
            "center_count": len(centers),
            "center_name": request.center_name
        }

        if result.unassignable_dates:
            self.booking_logger.log_booking_operation(
                "intelligent_booking",
                input_summary,
                {
                    "success": False,
                    "strategy": result.strategy.value if result.strategy else None,
                    "unavailable_dates": result.unassignable_dates
                },
                (time.time() - start_time) * 1000
            )
            raise PartialUnavailability(result.unassignable_dates, center_schedules(centers))

        booking = await self.repository.create_booking(guardian.id, dependent.id, result.assignments)

        centers_by_id = {center.id: center for center in centers}
        booking.guardian_name = guardian.name
        booking.guardian_email = guardian.email
        booking.dependent_name = dependent.name
        booking.dependent_birth_date = dependent.birth_date
        for day in booking.booking_days:
            if day.center_id in centers_by_id:
                day.center_name = centers_by_id[day.center_id].name

        summary = AssignmentSummary.from_assignments(result.assignments, centers_by_id)
        self.booking_logger.log_booking_operation(
            "intelligent_booking",
            input_summary,
            {
                "success": True,
                "booking_id": booking.id,
                "strategy": result.strategy.value if result.strategy else None,
                "centers_used": summary.centers_used,
                "total_days": summary.total_days
            },
            (time.time() - start_time) * 1000
        )
        return self._detail(booking, summary)

    async def create_manual_booking(self, request: ManualBookingRequest) -> BookingDetail:
        """Commit a booking whose days and centers were chosen by the caller."""
        if not request.booking_days:
            raise InvalidBookingRequest("booking_days must contain at least one day", field="booking_days")

        assignments = {}
        for day in request.booking_days:
            booked_date = parse_date(day.date)
            if booked_date in assignments:
                raise InvalidBookingRequest(
                    f"Date {booked_date.isoformat()} is listed more than once",
                    field="booking_days"
                )
            assignments[booked_date] = day.center_id

        guardian = await self.repository.get_guardian(request.guardian_id)
        if guardian is None:
            raise GuardianNotFound(request.guardian_id)

        dependent = await self.repository.get_dependent(request.dependent_id)
        if dependent is None or dependent.guardian_id != guardian.id:
            raise DependentNotFound(request.dependent_id)

        center_ids = {center_id for center_id in assignments.values() if center_id is not None}
        centers = await self.repository.get_centers(center_ids)
        known = {center.id for center in centers}
        missing = sorted(center_ids - known, key=str)
        if missing:
            raise CenterNotFound(center_id=missing[0])

        booking = await self.repository.create_booking(guardian.id, dependent.id, assignments)
        names = {center.id: center.name for center in centers}
        booking.guardian_name = guardian.name
        booking.guardian_email = guardian.email
        booking.dependent_name = dependent.name
        booking.dependent_birth_date = dependent.birth_date
        for day in booking.booking_days:
            day.center_name = names.get(day.center_id)
        return self._detail(booking)

    async def get_booking(self, booking_id: UUID) -> BookingDetail:
        booking = await self.repository.get_booking(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return self._detail(booking)

    async def list_bookings(
        self,
        status: Optional[str] = None,
        guardian_id: Optional[UUID] = None,
        center_id: Optional[UUID] = None
    ) -> List[BookingDetail]:
        status_filter = parse_booking_status(status) if status else None
        bookings = await self.repository.list_bookings(status_filter, guardian_id, center_id)
        return [self._detail(booking) for booking in bookings]

    async def update_booking_status(self, booking_id: UUID, status: str) -> BookingDetail:
        target = parse_booking_status(status)
        booking = await self.repository.update_booking_status(booking_id, target)
        return self._detail(booking)

    async def cancel_booking(self, booking_id: UUID) -> BookingDetail:
        return await self.update_booking_status(booking_id, BookingStatus.CANCELLED.value)

    async def respond_to_booking_day(self, booking_day_id: UUID, status: str) -> BookingDay:
        response = parse_day_response(status)
        return await self.repository.respond_to_booking_day(booking_day_id, response)

    async def list_centers(self, zip_code: Optional[str] = None) -> List[CenterSchedule]:
        centers = await self.repository.list_centers(zip_code)
        return [CenterSchedule.from_center(center) for center in stable_center_order(centers)]

    def _detail(
        self,
        booking: Booking,
        summary: Optional[AssignmentSummary] = None
    ) -> BookingDetail:
        days = sorted(booking.booking_days, key=lambda day: day.date)
        return BookingDetail(
            **booking.model_dump(exclude={"booking_days"}),
            booking_days=days,
            suggested_status=suggest_booking_status(booking.status, booking.day_statuses),
            assignment_summary=summary
        )
