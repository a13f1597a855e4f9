from typing import Dict, Any, List, Optional, Set
from barberpro.db.mongodb import db
from barberpro.schemas.appointment import AppointmentStatus
from barberpro.core.config import local_today
from datetime import date, datetime
from bson import ObjectId
from bson.errors import InvalidId
import logging

logger = logging.getLogger(__name__)

LIVE_STATUS_QUERY = {"$ne": AppointmentStatus.CANCELLED.value}

def _with_id(appointment: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if appointment:
        appointment["id"] = str(appointment["_id"])
    return appointment

async def list_booked_slots(barber_id: str, appointment_date: date) -> Set[str]:
    """
    Times already taken by non-cancelled appointments for a barber on a date
    """
    cursor = db.db.appointments.find(
        {
            "barberId": barber_id,
            "appointmentDate": appointment_date.isoformat(),
            "status": LIVE_STATUS_QUERY,
        },
        {"appointmentTime": 1},
    )
    appointments = await cursor.to_list(length=None)
    return {appointment["appointmentTime"][:5] for appointment in appointments}

async def find_appointment(
    barber_id: str,
    appointment_date: date,
    appointment_time: str,
    exclude_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Exact-key lookup of a live (non-cancelled) appointment, optionally
    ignoring one appointment by id
    """
    query = {
        "barberId": barber_id,
        "appointmentDate": appointment_date.isoformat(),
        "appointmentTime": appointment_time,
        "status": LIVE_STATUS_QUERY,
    }
    if exclude_id:
        query["_id"] = {"$ne": ObjectId(exclude_id)}
    appointment = await db.db.appointments.find_one(query)
    return _with_id(appointment)

async def insert_appointment(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert an appointment record. Store errors propagate to the caller.
    """
    appointment_data = dict(record)
    appointment_data.setdefault("status", AppointmentStatus.SCHEDULED.value)
    appointment_data.setdefault("reminderEmailSent", False)
    appointment_data["createdAt"] = datetime.utcnow()

    result = await db.db.appointments.insert_one(appointment_data)
    created_appointment = await db.db.appointments.find_one({"_id": result.inserted_id})
    return _with_id(created_appointment)

async def get_appointment_by_id(appointment_id: str) -> Optional[Dict[str, Any]]:
    try:
        appointment = await db.db.appointments.find_one({"_id": ObjectId(appointment_id)})
    except InvalidId:
        return None
    return _with_id(appointment)

def effective_status(appointment: Dict[str, Any], today: Optional[date] = None) -> str:
    """
    Status as shown to users: a non-cancelled appointment whose date has
    passed reads as completed. Nothing writes the completed status back.
    """
    stored = appointment.get("status", AppointmentStatus.SCHEDULED.value)
    if stored == AppointmentStatus.CANCELLED.value:
        return stored
    today = today or local_today()
    if stored == AppointmentStatus.COMPLETED.value or appointment["appointmentDate"] < today.isoformat():
        return AppointmentStatus.COMPLETED.value
    return AppointmentStatus.SCHEDULED.value

def effective_status_query(status: AppointmentStatus, today: Optional[date] = None) -> Dict[str, Any]:
    """Mongo filter selecting appointments whose effective_status is status."""
    today_iso = (today or local_today()).isoformat()
    scheduled = AppointmentStatus.SCHEDULED.value
    if status == AppointmentStatus.SCHEDULED:
        return {"status": scheduled, "appointmentDate": {"$gte": today_iso}}
    if status == AppointmentStatus.COMPLETED:
        return {"$or": [
            {"status": AppointmentStatus.COMPLETED.value},
            {"status": scheduled, "appointmentDate": {"$lt": today_iso}},
        ]}
    return {"status": status.value}

def split_upcoming_and_history(appointments: List[Dict[str, Any]], today: Optional[date] = None) -> Dict[str, List[Dict[str, Any]]]:
    """Today and later go to upcoming, earlier dates to history."""
    today_iso = (today or local_today()).isoformat()
    upcoming = [a for a in appointments if a["appointmentDate"] >= today_iso]
    history = [a for a in appointments if a["appointmentDate"] < today_iso]
    return {"upcoming": upcoming, "history": history}

async def attach_references(appointments: List[Dict[str, Any]], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Resolve barber and service names and compute the displayed status.
    Deleted barbers or services resolve to None.
    """
    barber_ids = {a["barberId"] for a in appointments}
    service_ids = {a["serviceId"] for a in appointments}

    barbers = {}
    for barber_id in barber_ids:
        if ObjectId.is_valid(barber_id):
            barber = await db.db.barbers.find_one({"_id": ObjectId(barber_id)}, {"name": 1})
            if barber:
                barbers[barber_id] = {"name": barber["name"]}

    services = {}
    for service_id in service_ids:
        if ObjectId.is_valid(service_id):
            service = await db.db.services.find_one({"_id": ObjectId(service_id)}, {"name": 1, "price": 1})
            if service:
                services[service_id] = {"name": service["name"], "price": service["price"]}

    for appointment in appointments:
        appointment["barber"] = barbers.get(appointment["barberId"])
        appointment["service"] = services.get(appointment["serviceId"])
        appointment["status"] = effective_status(appointment, today)

    return appointments

async def get_client_appointments(client_id: str) -> List[Dict[str, Any]]:
    """
    A client's appointments, newest date and time first
    """
    cursor = db.db.appointments.find({"clientId": client_id}).sort(
        [("appointmentDate", -1), ("appointmentTime", -1)]
    )
    appointments = await cursor.to_list(length=None)
    return [_with_id(appointment) for appointment in appointments]

async def list_appointments(
    barber_id: Optional[str] = None,
    appointment_date: Optional[date] = None,
    status: Optional[AppointmentStatus] = None,
    skip: int = 0,
    limit: int = 100,
    today: Optional[date] = None
) -> List[Dict[str, Any]]:
    """
    All appointments for the admin dashboard, newest first.

    The status filter matches the displayed status, so past scheduled
    appointments count as completed.
    """
    clauses = []
    if barber_id:
        clauses.append({"barberId": barber_id})
    if appointment_date:
        clauses.append({"appointmentDate": appointment_date.isoformat()})
    if status:
        clauses.append(effective_status_query(status, today))

    query = {"$and": clauses} if clauses else {}

    cursor = db.db.appointments.find(query).sort(
        [("appointmentDate", -1), ("appointmentTime", -1)]
    ).skip(skip).limit(limit)
    appointments = await cursor.to_list(length=limit)
    return [_with_id(appointment) for appointment in appointments]

async def update_appointment_status(appointment_id: str, status: AppointmentStatus) -> Optional[Dict[str, Any]]:
    """
    Admin status change. Returns None if the appointment does not exist.
    """
    appointment = await get_appointment_by_id(appointment_id)
    if not appointment:
        return None

    await db.db.appointments.update_one(
        {"_id": ObjectId(appointment_id)},
        {"$set": {"status": status.value, "updatedAt": datetime.utcnow()}}
    )
    logger.info(f"Appointment {appointment_id} status set to {status.value}")

    return await get_appointment_by_id(appointment_id)

async def get_appointments_needing_reminder(appointment_date: date) -> List[Dict[str, Any]]:
    """
    Scheduled appointments on a date that have not had a reminder email yet
    """
    cursor = db.db.appointments.find({
        "appointmentDate": appointment_date.isoformat(),
        "status": AppointmentStatus.SCHEDULED.value,
        "reminderEmailSent": False,
    })
    appointments = await cursor.to_list(length=None)
    return [_with_id(appointment) for appointment in appointments]

async def mark_reminder_sent(appointment_id: str) -> None:
    await db.db.appointments.update_one(
        {"_id": ObjectId(appointment_id)},
        {"$set": {"reminderEmailSent": True, "updatedAt": datetime.utcnow()}}
    )
