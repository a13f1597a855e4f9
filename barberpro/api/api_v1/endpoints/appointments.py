from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from typing import Optional
from datetime import date
from pymongo.errors import DuplicateKeyError

from barberpro.core.auth import get_current_user, get_current_admin
from barberpro.core.exceptions import (
    AppointmentInsertError, AvailabilityCheckError, BookingValidationError, SlotConflictError
)
from barberpro.schemas.appointment import (
    AppointmentCreate, AppointmentList, AppointmentResponse, AppointmentStatus, AppointmentStatusUpdate
)
from barberpro.services.appointment_service import (
    attach_references, get_appointment_by_id, get_client_appointments,
    list_appointments, split_upcoming_and_history
)
from barberpro.services.booking_service import change_appointment_status
from barberpro.services.booking_workflow import BookingWorkflow
from barberpro.services.email_service import send_confirmation_email

router = APIRouter()

@router.post("/", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_new_appointment(
    appointment_in: AppointmentCreate,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(get_current_user)
):
    """
    Book an appointment as a client.

    Runs the booking workflow end to end: service, barber, date and time are
    validated in order, the slot is re-checked and the appointment inserted.
    The confirmation email is sent after the response.
    """
    def queue_confirmation(**email_kwargs):
        background_tasks.add_task(send_confirmation_email, **email_kwargs)

    workflow = BookingWorkflow(current_user, send_confirmation=queue_confirmation)
    workflow.set_contact(appointment_in.clientName, appointment_in.clientPhone)

    try:
        await workflow.load()
        workflow.select_service(appointment_in.serviceId)
        workflow.next()
        workflow.select_barber(appointment_in.barberId)
        workflow.next()
        await workflow.select_date(appointment_in.appointmentDate)
        workflow.select_time(appointment_in.appointmentTime)
        workflow.next()
        appointment = await workflow.submit()
    except BookingValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except SlotConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except AvailabilityCheckError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except AppointmentInsertError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    appointments = await attach_references([appointment])
    return appointments[0]

@router.get("/me", response_model=AppointmentList)
async def get_my_appointments(current_user: dict = Depends(get_current_user)):
    """
    The current client's appointments split into upcoming and history
    """
    appointments = await get_client_appointments(str(current_user["_id"]))
    appointments = await attach_references(appointments)
    return split_upcoming_and_history(appointments)

@router.get("/", response_model=AppointmentList)
async def get_all_appointments(
    barber_id: Optional[str] = Query(None),
    appointment_date: Optional[date] = Query(None, alias="date"),
    appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_admin: dict = Depends(get_current_admin)
):
    """
    Admin view of all appointments split into upcoming and history
    """
    appointments = await list_appointments(
        barber_id=barber_id,
        appointment_date=appointment_date,
        status=appointment_status,
        skip=skip,
        limit=limit
    )
    appointments = await attach_references(appointments)
    return split_upcoming_and_history(appointments)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    current_user: dict = Depends(get_current_user)
):
    """
    Appointment details for its client or an admin
    """
    appointment = await get_appointment_by_id(appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    if appointment["clientId"] != str(current_user["_id"]) and current_user.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this appointment"
        )

    appointments = await attach_references([appointment])
    return appointments[0]

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def set_appointment_status(
    appointment_id: str,
    status_update: AppointmentStatusUpdate,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Cancel or complete an appointment (admin)
    """
    try:
        appointment = await change_appointment_status(appointment_id, status_update.status)
    except SlotConflictError as e:
        # Reinstating a cancelled appointment whose slot was rebooked
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except DuplicateKeyError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This time slot has already been booked"
        )
    except AvailabilityCheckError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    appointments = await attach_references([appointment])
    return appointments[0]
