import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
from barberpro.db.mongodb import db
from barberpro.schemas.notification import NotificationCreate
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
import logging

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[Dict[str, Any]], Awaitable[None]]


class NotificationBroker:
    """
    In-process fan-out of newly created notifications.

    Each live admin dashboard subscribes a callback and must call the returned
    unsubscribe function when it goes away.
    """

    def __init__(self):
        self._subscribers: Dict[int, NotificationCallback] = {}
        self._next_id = 0
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, callback: NotificationCallback) -> Callable[[], None]:
        subscription_id = self._next_id
        self._next_id += 1
        self._subscribers[subscription_id] = callback
        logger.info(f"Notification subscriber {subscription_id} added ({len(self._subscribers)} active)")

        def unsubscribe() -> None:
            if self._subscribers.pop(subscription_id, None) is not None:
                logger.info(f"Notification subscriber {subscription_id} removed")

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def _deliver(self, subscription_id: int, callback: NotificationCallback, event: Dict[str, Any]) -> None:
        try:
            await callback(event)
        except Exception as e:
            logger.error(f"Error delivering notification to subscriber {subscription_id}: {str(e)}")

    async def publish(self, event: Dict[str, Any]) -> None:
        """Deliver to every subscriber in turn and wait for all of them."""
        # Copy so callbacks may unsubscribe while we iterate
        for subscription_id, callback in list(self._subscribers.items()):
            await self._deliver(subscription_id, callback, event)

    def publish_nowait(self, event: Dict[str, Any]) -> None:
        """Deliver to each subscriber in its own task and return immediately."""
        loop = asyncio.get_running_loop()
        for subscription_id, callback in list(self._subscribers.items()):
            task = loop.create_task(self._deliver(subscription_id, callback, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for background deliveries started so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending))


broker = NotificationBroker()


def serialize_notification(notification: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-ready view of a notification document"""
    return {
        "id": str(notification["_id"]),
        "message": notification["message"],
        "appointmentId": notification.get("appointmentId"),
        "isRead": notification.get("isRead", False),
        "createdAt": notification["createdAt"].isoformat(),
    }


async def create_notification(notification: NotificationCreate) -> Dict[str, Any]:
    """
    Create a new notification and push it to live subscribers
    """
    notification_data = notification.model_dump()
    notification_data["isRead"] = False
    notification_data["createdAt"] = datetime.utcnow()

    result = await db.db.notifications.insert_one(notification_data)
    created_notification = await db.db.notifications.find_one({"_id": result.inserted_id})
    created_notification["id"] = str(created_notification["_id"])

    broker.publish_nowait(serialize_notification(created_notification))

    return created_notification


async def notify_new_appointment(appointment: Dict[str, Any], service_name: str, barber_name: str) -> Optional[Dict[str, Any]]:
    """
    Record the admin notification for a freshly booked appointment.
    Failures are logged and swallowed; the booking already exists.
    """
    message = (
        f"New appointment: {appointment['clientName']} - {service_name} with {barber_name} "
        f"on {appointment['appointmentDate']} at {appointment['appointmentTime']}"
    )
    try:
        return await create_notification(
            NotificationCreate(message=message, appointmentId=appointment["id"])
        )
    except Exception as e:
        logger.error(f"Could not create notification for appointment {appointment['id']}: {str(e)}")
        return None


async def get_notifications(
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 20
) -> List[Dict[str, Any]]:
    """
    Latest notifications, newest first
    """
    query = {}
    if unread_only:
        query["isRead"] = False

    cursor = db.db.notifications.find(query).sort("createdAt", -1).skip(skip).limit(limit)
    notifications = await cursor.to_list(length=limit)

    for notification in notifications:
        notification["id"] = str(notification["_id"])

    return notifications


async def mark_notification_read(notification_id: str) -> Optional[Dict[str, Any]]:
    """
    Mark a notification as read
    """
    try:
        object_id = ObjectId(notification_id)
    except InvalidId:
        return None

    await db.db.notifications.update_one(
        {"_id": object_id},
        {"$set": {"isRead": True}}
    )

    updated_notification = await db.db.notifications.find_one({"_id": object_id})
    if updated_notification:
        updated_notification["id"] = str(updated_notification["_id"])

    return updated_notification


async def mark_all_notifications_read() -> int:
    """
    Mark every unread notification as read
    """
    result = await db.db.notifications.update_many(
        {"isRead": False},
        {"$set": {"isRead": True}}
    )
    return result.modified_count


async def get_unread_notification_count() -> int:
    return await db.db.notifications.count_documents({"isRead": False})
