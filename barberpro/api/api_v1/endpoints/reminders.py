from fastapi import APIRouter, Depends
from typing import Any, Dict
from barberpro.core.auth import get_current_admin
from barberpro.services.email_service import send_reminder_emails

router = APIRouter()

@router.post("/send", response_model=Dict[str, Any])
async def run_reminder_emails(current_admin: dict = Depends(get_current_admin)):
    """
    Email tomorrow's clients a reminder. Meant to be called once a day by a
    scheduler; appointments already reminded are skipped.
    """
    return await send_reminder_emails()
