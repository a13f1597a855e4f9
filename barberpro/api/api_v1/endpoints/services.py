from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, List
from barberpro.core.auth import get_current_admin
from barberpro.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse
from barberpro.services.catalog_service import (
    create_service, delete_service, get_service_by_id, list_services, update_service
)

router = APIRouter()

@router.get("/", response_model=List[ServiceResponse])
async def get_services():
    """
    Active services, ordered by name
    """
    return await list_services(include_inactive=False)

@router.get("/all", response_model=List[ServiceResponse])
async def get_all_services(current_admin: dict = Depends(get_current_admin)):
    return await list_services(include_inactive=True)

@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str):
    service = await get_service_by_id(service_id)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found"
        )
    return service

@router.post("/", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_new_service(
    service_in: ServiceCreate,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Add a service (admin)
    """
    return await create_service(service_in)

@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service_details(
    service_id: str,
    service_update: ServiceUpdate,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Edit a service (admin)
    """
    service = await update_service(service_id, service_update)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found"
        )
    return service

@router.delete("/{service_id}", response_model=Dict[str, bool])
async def remove_service(
    service_id: str,
    current_admin: dict = Depends(get_current_admin)
):
    success = await delete_service(service_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found"
        )
    return {"success": success}
