from typing import Dict, Any, List, Optional
from barberpro.db.mongodb import db
from barberpro.schemas.barber import BarberCreate, BarberUpdate
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
import logging

logger = logging.getLogger(__name__)

def _with_id(barber: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if barber:
        barber["id"] = str(barber["_id"])
    return barber

async def create_barber(barber_in: BarberCreate) -> Dict[str, Any]:
    """
    Create a new barber
    """
    barber_data = barber_in.model_dump()
    barber_data["createdAt"] = datetime.utcnow()

    result = await db.db.barbers.insert_one(barber_data)
    created_barber = await db.db.barbers.find_one({"_id": result.inserted_id})

    logger.info(f"Barber created: {created_barber['name']}")
    return _with_id(created_barber)

async def get_barber_by_id(barber_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a barber by ID
    """
    try:
        barber = await db.db.barbers.find_one({"_id": ObjectId(barber_id)})
    except InvalidId:
        return None
    return _with_id(barber)

async def list_barbers(include_inactive: bool = False) -> List[Dict[str, Any]]:
    """
    List barbers ordered by name
    """
    query = {} if include_inactive else {"isActive": True}
    cursor = db.db.barbers.find(query).sort("name", 1)
    barbers = await cursor.to_list(length=None)
    return [_with_id(barber) for barber in barbers]

async def list_active_barbers() -> List[Dict[str, Any]]:
    return await list_barbers(include_inactive=False)

async def update_barber(barber_id: str, barber_update: BarberUpdate) -> Optional[Dict[str, Any]]:
    """
    Update a barber. Returns None if the barber does not exist.
    """
    barber = await get_barber_by_id(barber_id)
    if not barber:
        return None

    update_data = barber_update.model_dump(exclude_unset=True)

    if update_data:
        update_data["updatedAt"] = datetime.utcnow()
        await db.db.barbers.update_one(
            {"_id": ObjectId(barber_id)},
            {"$set": update_data}
        )

    return await get_barber_by_id(barber_id)

async def delete_barber(barber_id: str) -> bool:
    """
    Hard-delete a barber. Existing appointments keep the dangling reference.
    """
    try:
        result = await db.db.barbers.delete_one({"_id": ObjectId(barber_id)})
    except InvalidId:
        return False
    if result.deleted_count:
        logger.info(f"Barber {barber_id} deleted")
    return result.deleted_count > 0
