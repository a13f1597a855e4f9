"""Booking errors raised by the services layer.

Endpoints translate these into HTTP responses; the booking workflow keeps its
state when any of them is raised so the client can correct and resubmit.
"""


class BookingError(Exception):
    """Base class for booking failures"""


class BookingValidationError(BookingError):
    """A required selection is missing or invalid. No backend call was made."""


class AvailabilityCheckError(BookingError):
    """The conflict lookup itself failed. Safe to retry."""


class SlotConflictError(BookingError):
    """The (barber, date, time) slot is already taken."""


class AppointmentInsertError(BookingError):
    """The appointment write failed after a clean conflict check."""
