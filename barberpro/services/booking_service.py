from typing import Dict, Any, Optional
from datetime import date
import logging

from pymongo.errors import DuplicateKeyError, PyMongoError

from barberpro.core.exceptions import (
    AppointmentInsertError, AvailabilityCheckError, SlotConflictError
)
from barberpro.schemas.appointment import AppointmentStatus
from barberpro.services import appointment_service
from barberpro.services.notification_service import notify_new_appointment

logger = logging.getLogger(__name__)

async def ensure_slot_free(
    barber_id: str,
    appointment_date: date,
    appointment_time: str,
    exclude_id: Optional[str] = None
) -> None:
    """
    Re-check the exact (barber, date, time) key right before writing.
    exclude_id skips the appointment being changed.

    Raises AvailabilityCheckError if the lookup fails and SlotConflictError if
    a non-cancelled appointment already holds the key.
    """
    try:
        existing = await appointment_service.find_appointment(
            barber_id, appointment_date, appointment_time, exclude_id=exclude_id
        )
    except PyMongoError as e:
        logger.error(f"Availability check failed for barber {barber_id} on {appointment_date} {appointment_time}: {str(e)}")
        raise AvailabilityCheckError("Could not check slot availability, please try again") from e

    if existing:
        logger.warning(f"Slot conflict for barber {barber_id} on {appointment_date} at {appointment_time}")
        raise SlotConflictError("This time slot has already been booked. Please choose another time or barber.")

async def book_appointment(
    client: Dict[str, Any],
    service: Dict[str, Any],
    barber: Dict[str, Any],
    appointment_date: date,
    appointment_time: str,
    client_name: str,
    client_phone: str = "",
) -> Dict[str, Any]:
    """
    Check-then-insert a new appointment and record the admin notification.

    The unique index on live slots backs up the check: a concurrent writer
    that slips between the two steps surfaces as a SlotConflictError too.
    """
    await ensure_slot_free(barber["id"], appointment_date, appointment_time)

    record = {
        "clientId": str(client["_id"]),
        "barberId": barber["id"],
        "serviceId": service["id"],
        "appointmentDate": appointment_date.isoformat(),
        "appointmentTime": appointment_time,
        "status": AppointmentStatus.SCHEDULED.value,
        "clientName": client_name,
        "clientEmail": client.get("email", ""),
        "clientPhone": client_phone or "",
        "reminderEmailSent": False,
    }

    try:
        appointment = await appointment_service.insert_appointment(record)
    except DuplicateKeyError as e:
        logger.warning(f"Duplicate slot rejected by index for barber {barber['id']} on {appointment_date} at {appointment_time}")
        raise SlotConflictError("This time slot has already been booked. Please choose another time or barber.") from e
    except PyMongoError as e:
        logger.error(f"Could not insert appointment: {str(e)}")
        raise AppointmentInsertError("Could not create the appointment, please try again") from e

    logger.info(f"Appointment {appointment['id']} booked with {barber['name']} on {appointment_date} at {appointment_time}")

    await notify_new_appointment(appointment, service["name"], barber["name"])

    return appointment

async def change_appointment_status(appointment_id: str, status: AppointmentStatus) -> Optional[Dict[str, Any]]:
    """
    Admin status change. Reinstating a cancelled appointment goes through the
    same slot check as a new booking. Returns None if the appointment does
    not exist.
    """
    appointment = await appointment_service.get_appointment_by_id(appointment_id)
    if not appointment:
        return None

    if appointment["status"] == AppointmentStatus.CANCELLED.value and status != AppointmentStatus.CANCELLED:
        await ensure_slot_free(
            appointment["barberId"],
            date.fromisoformat(appointment["appointmentDate"]),
            appointment["appointmentTime"],
            exclude_id=appointment_id,
        )

    return await appointment_service.update_appointment_status(appointment_id, status)
