"""
Center responses to individual booking days
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from ...models.base import BookingDay
from ...models.requests import BookingDayResponse
from ...services.booking_service import BookingService
from ..dependencies import get_booking_service

router = APIRouter(prefix="/booking-days", tags=["Booking Days"])


@router.patch(
    "/{booking_day_id}/respond",
    response_model=BookingDay,
    summary="Accept or decline one booked day",
    responses={
        400: {"description": "Status other than ACCEPTED or DECLINED"},
        404: {"description": "Booking day not found"},
        409: {"description": "Day already answered or booking cancelled"},
    },
)
async def respond_to_booking_day(
    booking_day_id: UUID,
    response: BookingDayResponse,
    service: BookingService = Depends(get_booking_service),
) -> BookingDay:
    return await service.respond_to_booking_day(booking_day_id, response.status)
