"""
Transactional email through Resend.

Confirmation emails are fire-and-forget: they never raise, so a delivery
problem cannot affect the booking they belong to.
"""
import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import resend

from barberpro.core.config import settings, local_today
from barberpro.services.appointment_service import (
    attach_references, get_appointments_needing_reminder, mark_reminder_sent
)
from barberpro.utils.email_templates import (
    confirmation_email_template, format_long_date, reminder_email_template
)

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(Exception):
    pass


async def send_email(to: str, subject: str, html: str) -> Dict[str, Any]:
    """Send a single email. Raises on any delivery failure."""
    if not settings.RESEND_API_KEY:
        raise EmailNotConfiguredError("RESEND_API_KEY is not set")

    resend.api_key = settings.RESEND_API_KEY
    params = {
        "from": settings.EMAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    # The Resend SDK is synchronous
    response = await asyncio.to_thread(resend.Emails.send, params)
    logger.info(f"Email sent to {to}: {response}")
    return response


async def send_confirmation_email(
    client_email: str,
    client_name: str,
    service_name: str,
    barber_name: str,
    appointment_date: date,
    appointment_time: str,
) -> bool:
    """
    Best-effort booking confirmation. Returns False instead of raising.
    """
    logger.info(f"Sending confirmation email to {client_email} for {appointment_date} at {appointment_time}")
    try:
        html = confirmation_email_template(
            client_name, service_name, barber_name,
            format_long_date(appointment_date), appointment_time,
        )
        await send_email(client_email, "Appointment confirmed - BarberPro", html)
        return True
    except Exception as e:
        logger.error(f"Error sending confirmation email to {client_email}: {str(e)}")
        return False


async def send_reminder_emails(today: Optional[date] = None) -> Dict[str, Any]:
    """
    Email every scheduled appointment for tomorrow that has no reminder yet
    and flag it. One failed email does not stop the rest.
    """
    tomorrow = (today or local_today()) + timedelta(days=1)
    logger.info(f"Checking for appointments on {tomorrow.isoformat()}")

    appointments = await get_appointments_needing_reminder(tomorrow)
    appointments = await attach_references(appointments, today)
    logger.info(f"Found {len(appointments)} appointments needing reminders")

    results: List[Dict[str, Any]] = []
    for appointment in appointments:
        barber_name = (appointment.get("barber") or {}).get("name", "Barber")
        service_name = (appointment.get("service") or {}).get("name", "Service")
        try:
            html = reminder_email_template(
                appointment["clientName"], service_name, barber_name,
                format_long_date(tomorrow), appointment["appointmentTime"][:5],
            )
            await send_email(
                appointment["clientEmail"],
                "Reminder: your appointment is tomorrow - BarberPro",
                html,
            )
            await mark_reminder_sent(appointment["id"])
            results.append({"id": appointment["id"], "success": True})
        except Exception as e:
            logger.error(f"Error sending reminder to {appointment['clientEmail']}: {str(e)}")
            results.append({"id": appointment["id"], "success": False, "error": str(e)})

    return {"date": tomorrow.isoformat(), "processed": len(results), "results": results}
