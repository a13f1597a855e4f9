"""
Service catalog: the haircuts, shaves and other services clients can book.
"""
from typing import Dict, Any, List, Optional
from barberpro.db.mongodb import db
from barberpro.schemas.service import ServiceCreate, ServiceUpdate
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
import logging

logger = logging.getLogger(__name__)

def _with_id(service: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if service:
        service["id"] = str(service["_id"])
    return service

async def create_service(service_in: ServiceCreate) -> Dict[str, Any]:
    """
    Create a new service
    """
    service_data = service_in.model_dump()
    service_data["createdAt"] = datetime.utcnow()

    result = await db.db.services.insert_one(service_data)
    created_service = await db.db.services.find_one({"_id": result.inserted_id})

    logger.info(f"Service created: {created_service['name']}")
    return _with_id(created_service)

async def get_service_by_id(service_id: str) -> Optional[Dict[str, Any]]:
    try:
        service = await db.db.services.find_one({"_id": ObjectId(service_id)})
    except InvalidId:
        return None
    return _with_id(service)

async def list_services(include_inactive: bool = False) -> List[Dict[str, Any]]:
    """
    List services ordered by name
    """
    query = {} if include_inactive else {"isActive": True}
    cursor = db.db.services.find(query).sort("name", 1)
    services = await cursor.to_list(length=None)
    return [_with_id(service) for service in services]

async def list_active_services() -> List[Dict[str, Any]]:
    return await list_services(include_inactive=False)

async def update_service(service_id: str, service_update: ServiceUpdate) -> Optional[Dict[str, Any]]:
    """
    Update a service. Returns None if the service does not exist.
    """
    service = await get_service_by_id(service_id)
    if not service:
        return None

    update_data = service_update.model_dump(exclude_unset=True)

    if update_data:
        update_data["updatedAt"] = datetime.utcnow()
        await db.db.services.update_one(
            {"_id": ObjectId(service_id)},
            {"$set": update_data}
        )

    return await get_service_by_id(service_id)

async def delete_service(service_id: str) -> bool:
    try:
        result = await db.db.services.delete_one({"_id": ObjectId(service_id)})
    except InvalidId:
        return False
    return result.deleted_count > 0
