from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
from barberpro.core.auth import get_current_admin
from barberpro.schemas.barber import BarberCreate, BarberUpdate, BarberResponse
from barberpro.services.barber_service import (
    create_barber, delete_barber, get_barber_by_id, list_barbers, update_barber
)

router = APIRouter()

@router.get("/", response_model=List[BarberResponse])
async def get_barbers():
    """
    Active barbers, ordered by name
    """
    return await list_barbers(include_inactive=False)

@router.get("/all", response_model=List[BarberResponse])
async def get_all_barbers(current_admin: dict = Depends(get_current_admin)):
    """
    Every barber including inactive ones (admin)
    """
    return await list_barbers(include_inactive=True)

@router.get("/{barber_id}", response_model=BarberResponse)
async def get_barber(barber_id: str):
    barber = await get_barber_by_id(barber_id)
    if not barber:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Barber not found"
        )
    return barber

@router.post("/", response_model=BarberResponse, status_code=status.HTTP_201_CREATED)
async def create_new_barber(
    barber_in: BarberCreate,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Add a barber (admin)
    """
    return await create_barber(barber_in)

@router.put("/{barber_id}", response_model=BarberResponse)
async def update_barber_details(
    barber_id: str,
    barber_update: BarberUpdate,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Edit a barber (admin)
    """
    barber = await get_barber_by_id(barber_id)
    if not barber:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Barber not found"
        )

    # Working hours must stay well-formed after a partial update
    start = barber_update.workStartTime or barber["workStartTime"]
    end = barber_update.workEndTime or barber["workEndTime"]
    if start >= end:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="workStartTime must be before workEndTime"
        )

    return await update_barber(barber_id, barber_update)

@router.delete("/{barber_id}", response_model=Dict[str, bool])
async def remove_barber(
    barber_id: str,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Delete a barber (admin). Existing appointments are left untouched.
    """
    success = await delete_barber(barber_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Barber not found"
        )
    return {"success": success}
