"""Shared fixtures and fakes for the booking engine tests."""

import os

os.environ.setdefault("LOG_TO_FILE", "false")

import copy
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest

from carebooking.core.lifecycle import check_booking_transition, check_day_response
from carebooking.models.base import (
    Booking,
    BookingDay,
    BookingDayStatus,
    BookingStatus,
    Center,
    Dependent,
    Guardian,
    ScheduleException,
)
from carebooking.utils.exceptions import BookingDayNotFound, BookingNotFound, TransactionFailure

# Week of 2024-01-15 (Monday) .. 2024-01-21 (Sunday)
MON = date(2024, 1, 15)
TUE = date(2024, 1, 16)
WED = date(2024, 1, 17)
THU = date(2024, 1, 18)
FRI = date(2024, 1, 19)
SAT = date(2024, 1, 20)
SUN = date(2024, 1, 21)

WEEKDAYS = {1, 2, 3, 4, 5}
EVERY_DAY = {1, 2, 3, 4, 5, 6, 7}
WEEKEND = {6, 7}

AREA = "12345"


def make_center(
    name: str,
    operating_days,
    zip_code: str = AREA,
    exceptions: Optional[Dict[date, ScheduleException]] = None,
    daily_capacity: int = 20
) -> Center:
    return Center(
        id=uuid4(),
        name=name,
        daily_capacity=daily_capacity,
        zip_code=zip_code,
        operating_days=set(operating_days),
        exceptions=exceptions or {}
    )


class InMemoryBookingRepository:
    """Dict-backed stand-in for BookingRepository with the same contract."""

    def __init__(self):
        self.guardians: Dict[UUID, Guardian] = {}
        self.dependents: Dict[UUID, Dependent] = {}
        self.centers: Dict[UUID, Center] = {}
        self.bookings: Dict[UUID, Booking] = {}
        self.fail_on_date: Optional[date] = None
        self._clock = datetime(2024, 1, 10, 9, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def add_guardian(self, name: str = "John Doe", zip_code: str = AREA) -> Guardian:
        guardian = Guardian(
            id=uuid4(),
            name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            zip_code=zip_code,
            created_at=self._tick()
        )
        self.guardians[guardian.id] = guardian
        return guardian

    def add_dependent(self, guardian: Guardian, name: str) -> Dependent:
        dependent = Dependent(id=uuid4(), guardian_id=guardian.id, name=name, created_at=self._tick())
        self.dependents[dependent.id] = dependent
        return dependent

    def add_center(self, center: Center) -> Center:
        self.centers[center.id] = center
        return center

    @property
    def booking_day_count(self) -> int:
        return sum(len(booking.booking_days) for booking in self.bookings.values())

    async def get_guardian(self, guardian_id: UUID) -> Optional[Guardian]:
        return self.guardians.get(guardian_id)

    async def get_dependents(self, guardian_id: UUID) -> List[Dependent]:
        found = [d for d in self.dependents.values() if d.guardian_id == guardian_id]
        return sorted(found, key=lambda d: (d.created_at, str(d.id)))

    async def get_dependent(self, dependent_id: UUID) -> Optional[Dependent]:
        return self.dependents.get(dependent_id)

    async def get_centers_in_area(self, zip_code: str, dates=()) -> List[Center]:
        return sorted(
            (copy.deepcopy(c) for c in self.centers.values() if c.zip_code == zip_code),
            key=lambda c: (c.name, str(c.id))
        )

    async def list_centers(self, zip_code: Optional[str] = None) -> List[Center]:
        centers = [c for c in self.centers.values() if zip_code is None or c.zip_code == zip_code]
        return sorted(centers, key=lambda c: (c.name, str(c.id)))

    async def get_centers(self, center_ids) -> List[Center]:
        return [self.centers[i] for i in set(center_ids) if i in self.centers]

    async def create_booking(self, guardian_id, dependent_id, assignments) -> Booking:
        # Staged like a transaction: nothing is stored unless every row succeeds
        now = self._tick()
        booking = Booking(
            id=uuid4(),
            guardian_id=guardian_id,
            dependent_id=dependent_id,
            status=BookingStatus.DRAFT,
            created_at=now,
            updated_at=now
        )
        for day, center_id in sorted(assignments.items()):
            if day == self.fail_on_date or (center_id is not None and center_id not in self.centers):
                raise TransactionFailure(
                    "Booking could not be saved; no part of it was persisted",
                    operation="create_booking"
                )
            booking.booking_days.append(BookingDay(
                id=uuid4(),
                booking_id=booking.id,
                date=day,
                center_id=center_id,
                status=BookingDayStatus.PENDING
            ))
        self.bookings[booking.id] = booking
        return copy.deepcopy(booking)

    async def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        booking = self.bookings.get(booking_id)
        return self._with_names(booking) if booking else None

    async def list_bookings(self, status=None, guardian_id=None, center_id=None) -> List[Booking]:
        found = []
        for booking in self.bookings.values():
            if status and booking.status != status:
                continue
            if guardian_id and booking.guardian_id != guardian_id:
                continue
            if center_id and not any(day.center_id == center_id for day in booking.booking_days):
                continue
            found.append(self._with_names(booking))
        return sorted(found, key=lambda b: b.created_at, reverse=True)

    async def update_booking_status(self, booking_id: UUID, status: BookingStatus) -> Booking:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        check_booking_transition(booking.status, status)
        booking.status = status
        booking.updated_at = self._tick()
        # Same shape as get_booking: names and days included
        return await self.get_booking(booking_id)

    async def respond_to_booking_day(self, booking_day_id: UUID, response: BookingDayStatus) -> BookingDay:
        for booking in self.bookings.values():
            for day in booking.booking_days:
                if day.id == booking_day_id:
                    check_day_response(day.status, response, booking.status)
                    day.status = response
                    day.center_responded_at = self._tick()
                    return copy.deepcopy(day)
        raise BookingDayNotFound(booking_day_id)

    def _with_names(self, booking: Booking) -> Booking:
        result = copy.deepcopy(booking)
        guardian = self.guardians.get(booking.guardian_id)
        dependent = self.dependents.get(booking.dependent_id)
        result.guardian_name = guardian.name if guardian else None
        result.dependent_name = dependent.name if dependent else None
        for day in result.booking_days:
            center = self.centers.get(day.center_id)
            day.center_name = center.name if center else None
        return result


@pytest.fixture
def repository():
    return InMemoryBookingRepository()


@pytest.fixture
def guardian(repository):
    return repository.add_guardian()


@pytest.fixture
def weekday_center():
    return make_center("Weekday Only Center", WEEKDAYS)


@pytest.fixture
def tue_sat_center():
    return make_center("Tuesday-Saturday Center", {2, 3, 4, 5, 6})


@pytest.fixture
def weekend_center():
    return make_center("Weekend Only Center", WEEKEND)


@pytest.fixture
def full_week_center():
    return make_center("Full Week Center", EVERY_DAY)
