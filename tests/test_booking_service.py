"""Tests for the booking service workflow."""

from datetime import date
from uuid import uuid4

import pytest
import pytest_asyncio

from carebooking.models.base import BookingDayStatus, BookingStatus, ScheduleException
from carebooking.models.requests import IntelligentBookingRequest, ManualBookingDay, ManualBookingRequest
from carebooking.services.booking_service import BookingService, select_center, select_dependent
from carebooking.utils.exceptions import (
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
    PartialUnavailability,
    TransactionFailure,
)

from conftest import EVERY_DAY, FRI, MON, SAT, SUN, THU, TUE, WED, WEEKDAYS, make_center


@pytest.fixture
def service(repository):
    return BookingService(repository, today=lambda: date(2024, 1, 14))


@pytest.fixture
def family(repository, guardian):
    """Guardian with two children, Liam created first."""
    liam = repository.add_dependent(guardian, "Liam Doe")
    noah = repository.add_dependent(guardian, "Noah Doe")
    return guardian, liam, noah


def request_for(guardian, *dates, **kwargs):
    return IntelligentBookingRequest(
        guardian_id=guardian.id,
        request_dates=[d.isoformat() for d in dates] or None,
        **kwargs
    )


class TestSelection:

    def test_first_dependent_without_name(self, family):
        guardian, liam, noah = family
        assert select_dependent([liam, noah], guardian.id) == liam

    def test_dependent_name_is_case_insensitive_substring(self, family):
        guardian, liam, noah = family
        assert select_dependent([liam, noah], guardian.id, "noah") == noah
        assert select_dependent([liam, noah], guardian.id, "  NOA ") == noah

    def test_unmatched_name_never_falls_back(self, family):
        guardian, liam, noah = family
        with pytest.raises(NoMatchingDependent) as exc_info:
            select_dependent([liam, noah], guardian.id, "Emma")
        assert exc_info.value.dependent_name == "Emma"

    def test_no_dependents(self, guardian):
        with pytest.raises(NoDependentFound):
            select_dependent([], guardian.id)

    def test_center_name_match(self, weekday_center, weekend_center):
        assert select_center([weekday_center, weekend_center], "weekend") == weekend_center
        # Both match "only"; name order decides
        assert select_center([weekend_center, weekday_center], "only") == weekday_center

    def test_center_name_without_match(self, weekday_center):
        with pytest.raises(CenterNotFound) as exc_info:
            select_center([weekday_center], "Sunshine")
        assert exc_info.value.center_name == "Sunshine"


class TestIntelligentBooking:
    """End-to-end booking from a structured request."""

    @pytest.mark.asyncio
    async def test_single_center_booking(self, repository, service, family, weekday_center, weekend_center):
        guardian, liam, _ = family
        repository.add_center(weekday_center)
        repository.add_center(weekend_center)

        detail = await service.create_intelligent_booking(request_for(guardian, WED, MON, TUE))

        assert detail.status == BookingStatus.DRAFT
        assert detail.dependent_id == liam.id
        assert detail.dependent_name == "Liam Doe"
        assert detail.guardian_name == guardian.name
        assert [day.date for day in detail.booking_days] == [MON, TUE, WED]
        assert {day.center_id for day in detail.booking_days} == {weekday_center.id}
        assert all(day.status == BookingDayStatus.PENDING for day in detail.booking_days)
        assert all(day.center_name == weekday_center.name for day in detail.booking_days)
        assert detail.assignment_summary.total_days == 3
        assert detail.assignment_summary.centers_used == 1
        assert detail.assignment_summary.center_breakdown == {weekday_center.name: 3}
        assert detail.suggested_status == BookingStatus.DRAFT
        assert len(repository.bookings) == 1

    @pytest.mark.asyncio
    async def test_split_across_centers(self, repository, service, family, weekday_center, weekend_center):
        guardian, _, _ = family
        repository.add_center(weekday_center)
        repository.add_center(weekend_center)

        detail = await service.create_intelligent_booking(request_for(guardian, FRI, SAT, SUN))

        by_date = {day.date: day.center_id for day in detail.booking_days}
        assert by_date == {FRI: weekday_center.id, SAT: weekend_center.id, SUN: weekend_center.id}
        assert detail.assignment_summary.centers_used == 2
        assert detail.assignment_summary.center_breakdown == {
            weekday_center.name: 1,
            weekend_center.name: 2,
        }

    @pytest.mark.asyncio
    async def test_named_dependent(self, repository, service, family, full_week_center):
        guardian, _, noah = family
        repository.add_center(full_week_center)

        detail = await service.create_intelligent_booking(request_for(guardian, MON, dependent_name="noah"))
        assert detail.dependent_id == noah.id

    @pytest.mark.asyncio
    async def test_unknown_dependent_name_persists_nothing(self, repository, service, family, full_week_center):
        guardian, _, _ = family
        repository.add_center(full_week_center)

        with pytest.raises(NoMatchingDependent):
            await service.create_intelligent_booking(request_for(guardian, MON, dependent_name="Emma"))
        assert repository.bookings == {}

    @pytest.mark.asyncio
    async def test_preferred_center(self, repository, service, family):
        guardian, _, _ = family
        alpha = repository.add_center(make_center("Alpha Daycare", EVERY_DAY))
        sunny = repository.add_center(make_center("Sunny Days", EVERY_DAY))

        detail = await service.create_intelligent_booking(
            request_for(guardian, MON, TUE, center_name="sunny")
        )
        assert {day.center_id for day in detail.booking_days} == {sunny.id}
        assert alpha.id not in {day.center_id for day in detail.booking_days}

    @pytest.mark.asyncio
    async def test_preferred_center_not_covering_falls_back(self, repository, service, family):
        guardian, _, _ = family
        repository.add_center(make_center("Weekday Kids", WEEKDAYS))
        open_all_week = repository.add_center(make_center("Open All Week", EVERY_DAY))

        detail = await service.create_intelligent_booking(
            request_for(guardian, FRI, SAT, center_name="Weekday")
        )
        assert {day.center_id for day in detail.booking_days} == {open_all_week.id}

    @pytest.mark.asyncio
    async def test_unknown_center_name(self, repository, service, family, weekday_center):
        guardian, _, _ = family
        repository.add_center(weekday_center)

        with pytest.raises(CenterNotFound):
            await service.create_intelligent_booking(request_for(guardian, MON, center_name="Nowhere"))
        assert repository.bookings == {}

    @pytest.mark.asyncio
    async def test_partial_unavailability_persists_nothing(self, repository, service, family, weekend_center):
        guardian, _, _ = family
        repository.add_center(weekend_center)

        with pytest.raises(PartialUnavailability) as exc_info:
            await service.create_intelligent_booking(request_for(guardian, TUE, SAT))

        error = exc_info.value
        assert error.unavailable_dates == [TUE]
        assert error.available_centers == [{
            "id": str(weekend_center.id),
            "name": weekend_center.name,
            "operating_days": [6, 7],
        }]
        assert repository.bookings == {}
        assert repository.booking_day_count == 0

    @pytest.mark.asyncio
    async def test_closure_exception_makes_date_unavailable(self, repository, service, family):
        guardian, _, _ = family
        repository.add_center(make_center("Only Center", WEEKDAYS, exceptions={
            WED: ScheduleException(is_closed=True)
        }))

        with pytest.raises(PartialUnavailability) as exc_info:
            await service.create_intelligent_booking(request_for(guardian, TUE, WED, THU))
        assert exc_info.value.unavailable_dates == [WED]

    @pytest.mark.asyncio
    async def test_defaults_to_tomorrow(self, repository, service, family, full_week_center):
        guardian, _, _ = family
        repository.add_center(full_week_center)

        detail = await service.create_intelligent_booking(IntelligentBookingRequest(guardian_id=guardian.id))
        assert [day.date for day in detail.booking_days] == [MON]

    @pytest.mark.asyncio
    async def test_invalid_date_checked_first(self, repository, service):
        with pytest.raises(InvalidDate):
            await service.create_intelligent_booking(
                IntelligentBookingRequest(guardian_id=uuid4(), request_dates=["2024-01-15", "nope"])
            )

    @pytest.mark.asyncio
    async def test_unknown_guardian(self, service):
        with pytest.raises(GuardianNotFound) as exc_info:
            await service.create_intelligent_booking(IntelligentBookingRequest(guardian_id=uuid4()))
        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_guardian_without_dependents(self, repository, service, guardian, full_week_center):
        repository.add_center(full_week_center)
        with pytest.raises(NoDependentFound):
            await service.create_intelligent_booking(request_for(guardian, MON))

    @pytest.mark.asyncio
    async def test_no_centers_in_area(self, repository, service, family):
        guardian, _, _ = family
        repository.add_center(make_center("Far Away", EVERY_DAY, zip_code="99999"))

        with pytest.raises(NoCentersInArea) as exc_info:
            await service.create_intelligent_booking(request_for(guardian, MON))
        assert exc_info.value.zip_code == guardian.zip_code

    @pytest.mark.asyncio
    async def test_transaction_failure_persists_nothing(self, repository, service, family, full_week_center):
        guardian, _, _ = family
        repository.add_center(full_week_center)
        repository.fail_on_date = WED

        with pytest.raises(TransactionFailure):
            await service.create_intelligent_booking(request_for(guardian, MON, TUE, WED, THU))
        assert repository.bookings == {}
        assert repository.booking_day_count == 0


class TestManualBooking:

    @pytest.mark.asyncio
    async def test_explicit_days(self, repository, service, family, weekday_center, weekend_center):
        guardian, liam, _ = family
        repository.add_center(weekday_center)
        repository.add_center(weekend_center)

        detail = await service.create_manual_booking(ManualBookingRequest(
            guardian_id=guardian.id,
            dependent_id=liam.id,
            booking_days=[
                ManualBookingDay(date="2024-01-20", center_id=weekend_center.id),
                ManualBookingDay(date="2024-01-19", center_id=weekday_center.id),
            ]
        ))

        assert [(day.date, day.center_name) for day in detail.booking_days] == [
            (FRI, weekday_center.name),
            (SAT, weekend_center.name),
        ]
        assert detail.assignment_summary is None

    @pytest.mark.asyncio
    async def test_requires_days(self, service, family):
        guardian, liam, _ = family
        with pytest.raises(InvalidBookingRequest):
            await service.create_manual_booking(
                ManualBookingRequest(guardian_id=guardian.id, dependent_id=liam.id)
            )

    @pytest.mark.asyncio
    async def test_duplicate_date_rejected(self, repository, service, family, weekday_center, full_week_center):
        guardian, liam, _ = family
        repository.add_center(weekday_center)
        repository.add_center(full_week_center)

        with pytest.raises(InvalidBookingRequest) as exc_info:
            await service.create_manual_booking(ManualBookingRequest(
                guardian_id=guardian.id,
                dependent_id=liam.id,
                booking_days=[
                    ManualBookingDay(date="2024-01-15", center_id=weekday_center.id),
                    ManualBookingDay(date="2024-01-15", center_id=full_week_center.id),
                ]
            ))
        assert exc_info.value.field == "booking_days"
        assert repository.bookings == {}

    @pytest.mark.asyncio
    async def test_dependent_must_belong_to_guardian(self, repository, service, family, weekday_center):
        _, liam, _ = family
        other = repository.add_guardian("Jane Roe")
        repository.add_center(weekday_center)

        with pytest.raises(DependentNotFound):
            await service.create_manual_booking(ManualBookingRequest(
                guardian_id=other.id,
                dependent_id=liam.id,
                booking_days=[ManualBookingDay(date="2024-01-15", center_id=weekday_center.id)]
            ))

    @pytest.mark.asyncio
    async def test_unknown_center(self, repository, service, family):
        guardian, liam, _ = family
        with pytest.raises(CenterNotFound):
            await service.create_manual_booking(ManualBookingRequest(
                guardian_id=guardian.id,
                dependent_id=liam.id,
                booking_days=[ManualBookingDay(date="2024-01-15", center_id=uuid4())]
            ))
        assert repository.bookings == {}


class TestLifecycleOperations:

    @pytest_asyncio.fixture
    async def booking(self, repository, service, family, weekday_center):
        guardian, _, _ = family
        repository.add_center(weekday_center)
        return await service.create_intelligent_booking(request_for(guardian, MON, TUE))

    @pytest.mark.asyncio
    async def test_submit_and_confirm(self, service, booking):
        pending = await service.update_booking_status(booking.id, "PENDING")
        assert pending.status == BookingStatus.PENDING

        for day in booking.booking_days:
            answered = await service.respond_to_booking_day(day.id, "ACCEPTED")
            assert answered.status == BookingDayStatus.ACCEPTED
            assert answered.center_responded_at is not None

        detail = await service.get_booking(booking.id)
        assert detail.status == BookingStatus.PENDING
        assert detail.suggested_status == BookingStatus.CONFIRMED

        unchanged = await service.update_booking_status(booking.id, "PENDING")
        assert len(unchanged.booking_days) == 2
        assert unchanged.dependent_name == "Liam Doe"
        assert unchanged.suggested_status == BookingStatus.CONFIRMED

        confirmed = await service.update_booking_status(booking.id, "CONFIRMED")
        assert confirmed.status == BookingStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_mixed_responses_suggest_partial(self, service, booking):
        first, second = booking.booking_days
        await service.respond_to_booking_day(first.id, "ACCEPTED")
        await service.respond_to_booking_day(second.id, "DECLINED")

        detail = await service.get_booking(booking.id)
        assert detail.suggested_status == BookingStatus.PARTIAL

    @pytest.mark.asyncio
    async def test_illegal_transition(self, service, booking):
        with pytest.raises(InvalidStatusTransition):
            await service.update_booking_status(booking.id, "CONFIRMED")

    @pytest.mark.asyncio
    async def test_unknown_status(self, service, booking):
        with pytest.raises(InvalidStatus):
            await service.update_booking_status(booking.id, "FINISHED")

    @pytest.mark.asyncio
    async def test_second_response_rejected(self, service, booking):
        day = booking.booking_days[0]
        await service.respond_to_booking_day(day.id, "DECLINED")
        with pytest.raises(InvalidStatusTransition):
            await service.respond_to_booking_day(day.id, "ACCEPTED")

    @pytest.mark.asyncio
    async def test_cancelled_booking_rejects_responses(self, service, booking):
        cancelled = await service.cancel_booking(booking.id)
        assert cancelled.status == BookingStatus.CANCELLED
        assert [day.id for day in cancelled.booking_days] == [day.id for day in booking.booking_days]
        assert cancelled.suggested_status == BookingStatus.CANCELLED

        with pytest.raises(InvalidStatusTransition):
            await service.respond_to_booking_day(booking.booking_days[0].id, "ACCEPTED")

    @pytest.mark.asyncio
    async def test_invalid_day_response(self, service, booking):
        with pytest.raises(InvalidStatus):
            await service.respond_to_booking_day(booking.booking_days[0].id, "MAYBE")

    @pytest.mark.asyncio
    async def test_missing_booking(self, service):
        with pytest.raises(BookingNotFound):
            await service.get_booking(uuid4())

    @pytest.mark.asyncio
    async def test_list_filters(self, repository, service, booking, weekday_center):
        await service.update_booking_status(booking.id, "PENDING")

        assert [b.id for b in await service.list_bookings(status="PENDING")] == [booking.id]
        assert await service.list_bookings(status="DRAFT") == []
        assert [b.id for b in await service.list_bookings(center_id=weekday_center.id)] == [booking.id]
        assert await service.list_bookings(guardian_id=uuid4()) == []

        with pytest.raises(InvalidStatus):
            await service.list_bookings(status="nope")


class TestCenters:

    @pytest.mark.asyncio
    async def test_list_centers(self, repository, service, weekend_center, weekday_center):
        repository.add_center(weekend_center)
        repository.add_center(weekday_center)
        repository.add_center(make_center("Elsewhere", EVERY_DAY, zip_code="99999"))

        schedules = await service.list_centers("12345")
        assert [s.name for s in schedules] == [weekday_center.name, weekend_center.name]
        assert schedules[1].operating_days == [6, 7]
        assert len(await service.list_centers()) == 3
