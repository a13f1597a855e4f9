from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, time

DEFAULT_WORK_DAYS = [1, 2, 3, 4, 5, 6]  # Monday to Saturday

def _parse_clock(value: str) -> str:
    """Normalize a HH:MM or HH:MM:SS time-of-day string to HH:MM"""
    try:
        parsed = time.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError("Time must be formatted as HH:MM")
    return parsed.strftime("%H:%M")

def _check_work_days(days: List[int]) -> List[int]:
    if any(day < 1 or day > 7 for day in days):
        raise ValueError("Work days must be ISO weekday numbers (1=Monday..7=Sunday)")
    return sorted(set(days))

class BarberCreate(BaseModel):
    name: str = Field(..., min_length=1)
    photoUrl: Optional[str] = None
    workStartTime: str = "09:00"
    workEndTime: str = "18:00"
    workDays: List[int] = Field(default_factory=lambda: list(DEFAULT_WORK_DAYS))
    isActive: bool = True

    @field_validator("workStartTime", "workEndTime")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        return _parse_clock(value)

    @field_validator("workDays")
    @classmethod
    def validate_work_days(cls, value: List[int]) -> List[int]:
        return _check_work_days(value)

    @model_validator(mode="after")
    def check_working_hours(self):
        if self.workStartTime >= self.workEndTime:
            raise ValueError("workStartTime must be before workEndTime")
        return self

class BarberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    photoUrl: Optional[str] = None
    workStartTime: Optional[str] = None
    workEndTime: Optional[str] = None
    workDays: Optional[List[int]] = None
    isActive: Optional[bool] = None

    @field_validator("workStartTime", "workEndTime")
    @classmethod
    def validate_clock(cls, value: Optional[str]) -> Optional[str]:
        return _parse_clock(value) if value is not None else value

    @field_validator("workDays")
    @classmethod
    def validate_work_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        return _check_work_days(value) if value is not None else value

class BarberResponse(BaseModel):
    id: str
    name: str
    photoUrl: Optional[str] = None
    workStartTime: str
    workEndTime: str
    workDays: List[int]
    isActive: bool
    createdAt: datetime
    updatedAt: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)
