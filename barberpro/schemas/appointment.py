from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import date, datetime, time
from enum import Enum

class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class AppointmentCreate(BaseModel):
    serviceId: str
    barberId: str
    appointmentDate: date
    appointmentTime: str
    clientName: Optional[str] = None
    clientPhone: Optional[str] = None

    @field_validator("appointmentTime")
    @classmethod
    def validate_time(cls, value: str) -> str:
        try:
            parsed = time.fromisoformat(value)
        except ValueError:
            raise ValueError("appointmentTime must be formatted as HH:MM")
        if parsed.second or parsed.microsecond:
            raise ValueError("appointmentTime must be a whole minute")
        return parsed.strftime("%H:%M")

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class BarberSummary(BaseModel):
    name: str

class ServiceSummary(BaseModel):
    name: str
    price: float

class AppointmentResponse(BaseModel):
    id: str
    barberId: str
    serviceId: str
    clientId: str
    appointmentDate: str
    appointmentTime: str
    status: AppointmentStatus
    clientName: str
    clientEmail: str
    clientPhone: str = ""
    reminderEmailSent: bool = False
    createdAt: datetime
    updatedAt: Optional[datetime] = None
    # Resolved at read time; null when the barber or service was deleted
    barber: Optional[BarberSummary] = None
    service: Optional[ServiceSummary] = None

    model_config = ConfigDict(populate_by_name=True)

class AppointmentList(BaseModel):
    upcoming: List[AppointmentResponse]
    history: List[AppointmentResponse]
