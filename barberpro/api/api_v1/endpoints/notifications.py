from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from typing import List, Dict, Any
import logging

from barberpro.core.auth import get_current_admin, get_user_for_token
from barberpro.schemas.notification import NotificationResponse
from barberpro.services.notification_service import (
    broker, get_notifications, get_unread_notification_count,
    mark_all_notifications_read, mark_notification_read
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[NotificationResponse])
async def get_admin_notifications(
    unread_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_admin: dict = Depends(get_current_admin)
):
    """
    Latest notifications for the admin dashboard
    """
    return await get_notifications(unread_only=unread_only, skip=skip, limit=limit)

@router.get("/count", response_model=Dict[str, int])
async def get_notification_count(current_admin: dict = Depends(get_current_admin)):
    """
    Unread notification count
    """
    count = await get_unread_notification_count()
    return {"count": count}

@router.put("/read-all", response_model=Dict[str, int])
async def mark_all_as_read(current_admin: dict = Depends(get_current_admin)):
    """
    Mark all notifications as read
    """
    count = await mark_all_notifications_read()
    return {"count": count}

@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
    notification_id: str,
    current_admin: dict = Depends(get_current_admin)
):
    """
    Mark a notification as read
    """
    notification = await mark_notification_read(notification_id)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    return notification

@router.websocket("/ws")
async def notifications_feed(websocket: WebSocket, token: str = Query(...)):
    """
    Live feed of new notifications for an admin dashboard.

    Browsers cannot set headers on a WebSocket handshake, so the bearer token
    travels in the query string. A {"type": "subscribed"} message is sent once
    the feed is live.
    """
    user = await get_user_for_token(token)
    if user is None or user.get("role") != "admin":
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    async def forward(event: Dict[str, Any]) -> None:
        await websocket.send_json({"type": "notification", "data": event})

    await websocket.accept()
    unsubscribe = broker.subscribe(forward)
    try:
        await websocket.send_json({"type": "subscribed"})
        # Client messages are ignored; receiving detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Notification feed closed for {user.get('email')}")
    finally:
        unsubscribe()
