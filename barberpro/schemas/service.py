from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    durationMinutes: int = Field(30, gt=0)  # Duration in minutes
    isActive: bool = True

class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    durationMinutes: Optional[int] = Field(None, gt=0)
    isActive: Optional[bool] = None

class ServiceResponse(BaseModel):
    id: str
    name: str
    price: float
    durationMinutes: int
    isActive: bool
    createdAt: datetime
    updatedAt: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)
