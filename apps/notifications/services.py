from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from asgiref.sync import sync_to_async

from apps.core.pubsub import publish_event, user_channel
from apps.notifications.models import Notification

logger = logging.getLogger(__name__)


@dataclass
class NotificationPayload:
    type: str
    title: str = ""
    message: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)


def create_in_app_notification(user_id: int, payload: NotificationPayload) -> Notification:
    return Notification.objects.create(
        user_id=user_id,
        type=payload.type,
        title=payload.title,
        message=payload.message,
        payload=payload.payload,
    )


def deliver_notification(user_id: int, payload: NotificationPayload) -> Notification:
    """Store the notification, then fan it out to the user's realtime channel."""
    notification = create_in_app_notification(user_id, payload)
    published = publish_event(
        user_channel(user_id),
        {
            "type": "notification",
            "id": notification.id,
            "kind": payload.type,
            "title": payload.title,
            "message": payload.message,
            "data": payload.payload,
        },
    )
    if not published:
        logger.info("notifications.realtime_skipped", extra={"user_id": user_id, "kind": payload.type})
    return notification


class DjangoNotificationSink:
    async def notify(self, user_id: str, type: str, title: str, message: str, data: Dict[str, Any]) -> None:
        payload = NotificationPayload(type=type, title=title, message=message, payload=data)
        await sync_to_async(deliver_notification)(int(user_id), payload)
