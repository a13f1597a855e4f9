"""
Slot generation and availability for a barber's working day.

Slots are "HH:MM" strings stepped from the barber's start time up to, but
never including, the end time. Booked slots stay in the list and are only
flagged as unavailable so clients see the whole shape of the day.
"""
from typing import Any, Dict, Iterable, List, Optional
from datetime import date, datetime, time, timedelta

from barberpro.core.config import settings, local_today
from barberpro.services.appointment_service import list_booked_slots


DATE_IN_PAST = "date_in_past"
NOT_A_WORK_DAY = "not_a_work_day"


def _clock(value: str) -> time:
    return time.fromisoformat(value)


def generate_time_slots(work_start_time: str, work_end_time: str,
                        interval_minutes: Optional[int] = None) -> List[str]:
    """
    Candidate start times from work_start_time while t < work_end_time.

    Returns an empty list when the start is not before the end.
    """
    step = timedelta(minutes=interval_minutes or settings.SLOT_INTERVAL_MINUTES)
    # Any fixed date works; only the clock part is kept
    anchor = date(2000, 1, 1)
    current = datetime.combine(anchor, _clock(work_start_time))
    end = datetime.combine(anchor, _clock(work_end_time))

    slots = []
    while current < end:
        slots.append(current.strftime("%H:%M"))
        current += step
    return slots


def iso_weekday(day: date) -> int:
    """1=Monday..7=Sunday"""
    return day.isoweekday()


def normalize_weekday(weekday: int) -> int:
    """Map a Sunday-as-0 weekday number onto the ISO 1..7 range."""
    return 7 if weekday == 0 else weekday


def date_disabled_reason(barber: Dict[str, Any], day: date,
                         today: Optional[date] = None) -> Optional[str]:
    """Why a whole date cannot be booked with this barber, or None if it can."""
    today = today or local_today()
    if day < today:
        return DATE_IN_PAST
    work_days = {normalize_weekday(d) for d in barber.get("workDays", [])}
    if iso_weekday(day) not in work_days:
        return NOT_A_WORK_DAY
    return None


def is_date_disabled(barber: Dict[str, Any], day: date,
                     today: Optional[date] = None) -> bool:
    return date_disabled_reason(barber, day, today) is not None


def mark_availability(slots: Iterable[str], booked: Iterable[str]) -> List[Dict[str, Any]]:
    """Pair every slot with an availability flag, keeping order and all slots."""
    booked = {value[:5] for value in booked}
    return [{"time": slot, "available": slot not in booked} for slot in slots]


async def get_day_availability(barber: Dict[str, Any], day: date,
                               today: Optional[date] = None) -> Dict[str, Any]:
    """
    Slots for a barber on a date with availability flags.

    Disabled dates skip the booking lookup and return every slot unavailable.
    """
    slots = generate_time_slots(barber["workStartTime"], barber["workEndTime"])
    reason = date_disabled_reason(barber, day, today)

    if reason:
        marked = [{"time": slot, "available": False} for slot in slots]
    else:
        booked = await list_booked_slots(barber["id"], day)
        marked = mark_availability(slots, booked)

    return {
        "barberId": barber["id"],
        "date": day.isoformat(),
        "disabled": reason is not None,
        "disabledReason": reason,
        "slots": marked,
    }
