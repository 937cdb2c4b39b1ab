"""
Center schedule lookup
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...models.results import CenterSchedule
from ...services.booking_service import BookingService
from ..dependencies import get_booking_service

router = APIRouter(prefix="/centers", tags=["Centers"])


@router.get("", response_model=List[CenterSchedule], summary="List centers with operating days")
async def list_centers(
    zip_code: Optional[str] = Query(None, description="Restrict to one postal area"),
    service: BookingService = Depends(get_booking_service),
) -> List[CenterSchedule]:
    """Operating days use 1 = Monday .. 7 = Sunday"""
    return await service.list_centers(zip_code)
