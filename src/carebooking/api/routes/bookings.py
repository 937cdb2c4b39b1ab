"""
Booking creation and lifecycle API routes
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ...models.requests import BookingStatusUpdate, IntelligentBookingRequest, ManualBookingRequest
from ...models.results import BookingDetail
from ...services.booking_service import BookingService
from ..dependencies import get_booking_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "/intelligent",
    response_model=BookingDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Book care without choosing a center",
    description="""
    Resolve the guardian's dependent and the centers in their postal area,
    assign every requested date to a center and commit the booking.

    **Assignment order:**
    1. The named center, when it is open on every requested date
    2. Any single center open on every requested date (by name)
    3. Greedy cover: repeatedly the center open on most remaining dates

    When some dates cannot be served the response is 400 with
    `unavailable_dates` and the candidate centers' `operating_days`
    (1 = Monday .. 7 = Sunday), and nothing is persisted.
    """,
    responses={
        201: {"description": "Booking created"},
        400: {"description": "Malformed date or dates no center can serve"},
        404: {"description": "Unknown guardian, dependent, center or area"},
    },
)
async def create_intelligent_booking(
    request: IntelligentBookingRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingDetail:
    return await service.create_intelligent_booking(request)


@router.post(
    "",
    response_model=BookingDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Book explicitly chosen days and centers",
)
async def create_booking(
    request: ManualBookingRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingDetail:
    return await service.create_manual_booking(request)


@router.get("", response_model=List[BookingDetail], summary="List bookings")
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    guardian_id: Optional[UUID] = Query(None),
    center_id: Optional[UUID] = Query(None),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingDetail]:
    """Bookings, newest first, with days ordered by date"""
    return await service.list_bookings(status_filter, guardian_id, center_id)


@router.get("/{booking_id}", response_model=BookingDetail, summary="Get booking")
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
) -> BookingDetail:
    return await service.get_booking(booking_id)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingDetail,
    summary="Move a booking through its lifecycle",
    responses={
        400: {"description": "Status is not one of the five booking statuses"},
        404: {"description": "Booking not found"},
        409: {"description": "Transition not allowed from the current status"},
    },
)
async def update_booking_status(
    booking_id: UUID,
    update: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
) -> BookingDetail:
    return await service.update_booking_status(booking_id, update.status)


@router.post("/{booking_id}/cancel", response_model=BookingDetail, summary="Cancel a booking")
async def cancel_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
) -> BookingDetail:
    logger.info(f"Cancellation requested for booking {booking_id}")
    return await service.cancel_booking(booking_id)
