from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class NotificationCreate(BaseModel):
    message: str
    appointmentId: Optional[str] = None

class NotificationResponse(BaseModel):
    id: str
    message: str
    appointmentId: Optional[str] = None
    isRead: bool = False
    createdAt: datetime

    model_config = ConfigDict(populate_by_name=True)
