from pydantic import BaseModel
from typing import Optional, List

class SlotAvailability(BaseModel):
    time: str
    available: bool

class DayAvailability(BaseModel):
    barberId: str
    date: str
    disabled: bool
    disabledReason: Optional[str] = None
    slots: List[SlotAvailability]
