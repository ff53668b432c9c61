# guardian_ping/notification.py

import logging
from typing import Optional

from . import messages
from .capabilities import NotificationScheduler, request_permission
from .errors import NotificationError
from .models import Notification, PingRequest, PingType, Urgency

logger = logging.getLogger(__name__)

PRIORITY_MAX = "max"
PRIORITY_HIGH = "high"


def build_notification(request: PingRequest) -> Notification:
    """Build the local alert shown for a ping."""
    return Notification(
        title=messages.notification_title(request.type),
        body=request.message or messages.notification_body(request.type),
        data={
            "kind": "ping",
            "ping_id": request.id,
            "ping_type": request.type.value,
            "urgency": request.urgency.value,
            "expires_at": request.expires_at,
        },
        priority=PRIORITY_MAX if request.urgency == Urgency.EMERGENCY else PRIORITY_HIGH,
        sound="default" if request.type == PingType.RING else None,
    )


class NotificationBridge:
    """
    Stands in for the push transport: schedules an immediate local notification
    for each ping through the host's notification scheduler.
    """

    def __init__(self, scheduler: Optional[NotificationScheduler] = None):
        self._scheduler = scheduler

    async def request_permission(self) -> bool:
        return await request_permission(self._scheduler, "Notification")

    async def schedule(self, request: PingRequest) -> Optional[str]:
        """
        Raises:
            NotificationError: If no scheduler is configured or scheduling failed
        """
        if self._scheduler is None:
            raise NotificationError("No notification scheduler configured")

        notification = build_notification(request)
        try:
            notification_id = await self._scheduler.schedule(notification)
        except Exception as e:
            raise NotificationError(f"Failed to schedule notification for {request.id}: {e}") from e

        logger.debug("Scheduled notification %s for ping %s", notification_id, request.id)
        return notification_id
