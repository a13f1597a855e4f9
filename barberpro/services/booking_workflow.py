"""
The four-stage client booking flow.

    SELECTING_SERVICE -> SELECTING_BARBER -> SELECTING_DATE_TIME -> CONFIRMING -> SUBMITTED

Moves forward only on a valid selection and back one stage at a time. A
failed submission leaves the workflow in CONFIRMING so it can be resubmitted.
"""
import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from barberpro.core.config import local_today
from barberpro.core.exceptions import BookingValidationError, SlotConflictError
from barberpro.services.availability_service import get_day_availability
from barberpro.services.barber_service import list_active_barbers
from barberpro.services.booking_service import book_appointment
from barberpro.services.catalog_service import list_active_services
from barberpro.services.email_service import send_confirmation_email

logger = logging.getLogger(__name__)

ConfirmationSender = Callable[..., Any]

_background_tasks: Set[asyncio.Task] = set()


class BookingStep(int, Enum):
    SELECTING_SERVICE = 1
    SELECTING_BARBER = 2
    SELECTING_DATE_TIME = 3
    CONFIRMING = 4
    SUBMITTED = 5


def schedule_confirmation(**email_kwargs) -> None:
    """Default sender: run the confirmation email as a detached task."""
    task = asyncio.get_running_loop().create_task(send_confirmation_email(**email_kwargs))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


class BookingWorkflow:
    def __init__(
        self,
        client: Dict[str, Any],
        send_confirmation: Optional[ConfirmationSender] = None,
        today: Optional[date] = None,
    ):
        self.client = client
        self.step = BookingStep.SELECTING_SERVICE
        self.services: List[Dict[str, Any]] = []
        self.barbers: List[Dict[str, Any]] = []

        self.service: Optional[Dict[str, Any]] = None
        self.barber: Optional[Dict[str, Any]] = None
        self.date: Optional[date] = None
        self.time: Optional[str] = None
        self.slots: List[Dict[str, Any]] = []
        self.appointment: Optional[Dict[str, Any]] = None

        email = client.get("email") or ""
        self.client_name = client.get("fullName") or email.split("@")[0] or "Client"
        self.client_phone = client.get("phone") or ""

        self._send_confirmation = send_confirmation or schedule_confirmation
        self._today = today

    @property
    def today(self) -> date:
        return self._today or local_today()

    async def load(self) -> None:
        """Fetch the active services and barbers offered in the flow."""
        self.services = await list_active_services()
        self.barbers = await list_active_barbers()

    def _require_step(self, step: BookingStep) -> None:
        if self.step != step:
            raise BookingValidationError(
                f"Cannot do this while {self.step.name.lower()}; expected {step.name.lower()}"
            )

    def select_service(self, service_id: str) -> Dict[str, Any]:
        self._require_step(BookingStep.SELECTING_SERVICE)
        service = next((s for s in self.services if s["id"] == service_id), None)
        if service is None:
            raise BookingValidationError("Service not available")
        self.service = service
        return service

    def select_barber(self, barber_id: str) -> Dict[str, Any]:
        self._require_step(BookingStep.SELECTING_BARBER)
        barber = next((b for b in self.barbers if b["id"] == barber_id), None)
        if barber is None:
            raise BookingValidationError("Barber not available")
        if self.barber is None or self.barber["id"] != barber["id"]:
            # Slots depend on the barber
            self.date = None
            self.time = None
            self.slots = []
        self.barber = barber
        return barber

    async def select_date(self, day: date) -> List[Dict[str, Any]]:
        """Pick a date and load its slots. Disabled dates are rejected."""
        self._require_step(BookingStep.SELECTING_DATE_TIME)
        availability = await get_day_availability(self.barber, day, self.today)
        if availability["disabled"]:
            raise BookingValidationError(
                f"{day.isoformat()} is not available for booking ({availability['disabledReason']})"
            )
        self.date = day
        self.time = None
        self.slots = availability["slots"]
        return self.slots

    def select_time(self, value: str) -> str:
        self._require_step(BookingStep.SELECTING_DATE_TIME)
        if self.date is None:
            raise BookingValidationError("Choose a date first")
        slot = next((s for s in self.slots if s["time"] == value), None)
        if slot is None:
            raise BookingValidationError(f"{value} is not a bookable time for this barber")
        if not slot["available"]:
            raise SlotConflictError("This time slot has already been booked. Please choose another time.")
        self.time = value
        return value

    def set_contact(self, name: Optional[str] = None, phone: Optional[str] = None) -> None:
        if name:
            self.client_name = name
        if phone is not None:
            self.client_phone = phone

    def next(self) -> BookingStep:
        """Advance one stage if the current stage's selection is complete."""
        if self.step == BookingStep.SELECTING_SERVICE:
            if self.service is None:
                raise BookingValidationError("Choose a service")
        elif self.step == BookingStep.SELECTING_BARBER:
            if self.barber is None:
                raise BookingValidationError("Choose a barber")
        elif self.step == BookingStep.SELECTING_DATE_TIME:
            if self.date is None or self.time is None:
                raise BookingValidationError("Choose a date and time")
        else:
            raise BookingValidationError("Nothing to advance to; submit the booking instead")

        self.step = BookingStep(self.step + 1)
        return self.step

    def back(self) -> BookingStep:
        if self.step == BookingStep.SUBMITTED:
            raise BookingValidationError("Booking already submitted")
        if self.step > BookingStep.SELECTING_SERVICE:
            self.step = BookingStep(self.step - 1)
        return self.step

    async def submit(self) -> Dict[str, Any]:
        """
        Book the selected slot. Booking errors propagate with the workflow
        still in CONFIRMING; the confirmation email never affects the result.
        """
        self._require_step(BookingStep.CONFIRMING)
        if not (self.service and self.barber and self.date and self.time):
            raise BookingValidationError("Fill in all fields")

        appointment = await book_appointment(
            client=self.client,
            service=self.service,
            barber=self.barber,
            appointment_date=self.date,
            appointment_time=self.time,
            client_name=self.client_name,
            client_phone=self.client_phone,
        )
        self.appointment = appointment
        self.step = BookingStep.SUBMITTED

        self._dispatch_confirmation()
        return appointment

    def _dispatch_confirmation(self) -> None:
        try:
            self._send_confirmation(
                client_email=self.client.get("email", ""),
                client_name=self.client_name,
                service_name=self.service["name"],
                barber_name=self.barber["name"],
                appointment_date=self.date,
                appointment_time=self.time,
            )
        except Exception as e:
            logger.error(f"Could not dispatch confirmation email for appointment {self.appointment['id']}: {str(e)}")
