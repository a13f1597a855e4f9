from fastapi import APIRouter, HTTPException, Query, status
from datetime import date
from barberpro.schemas.availability import DayAvailability
from barberpro.services.availability_service import get_day_availability
from barberpro.services.barber_service import get_barber_by_id

router = APIRouter()

@router.get("/{barber_id}", response_model=DayAvailability)
async def get_barber_day_availability(
    barber_id: str,
    day: date = Query(..., alias="date", description="Day to check, YYYY-MM-DD")
):
    """
    Every slot of the barber's working day with an availability flag.
    Past dates and days off come back disabled with all slots unavailable.
    """
    barber = await get_barber_by_id(barber_id)
    if not barber or not barber.get("isActive", True):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Barber not found"
        )

    return await get_day_availability(barber, day)
