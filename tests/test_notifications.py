from __future__ import annotations

from unittest.mock import patch

from asgiref.sync import async_to_sync
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from apps.notifications.models import Notification
from apps.notifications.services import DjangoNotificationSink, NotificationPayload, deliver_notification

User = get_user_model()


class NotificationDeliveryTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="ana", password="pass123")

    def test_deliver_stores_row_and_publishes_to_user_channel(self) -> None:
        payload = NotificationPayload(type="match", title="New Match! 🎉", message="hi", payload={"match_id": "7"})
        with patch("apps.notifications.services.publish_event", return_value=True) as mocked_publish:
            notification = deliver_notification(self.user.id, payload)

        assert Notification.objects.filter(user=self.user, type="match").count() == 1
        channel, event = mocked_publish.call_args[0]
        assert channel == f"user:{self.user.id}"
        assert event == {
            "type": "notification",
            "id": notification.id,
            "kind": "match",
            "title": "New Match! 🎉",
            "message": "hi",
            "data": {"match_id": "7"},
        }

    @override_settings(FEATURE_FLAGS={"realtime": False, "vibe_matching": True})
    def test_realtime_disabled_still_stores_row(self) -> None:
        deliver_notification(self.user.id, NotificationPayload(type="match"))

        assert Notification.objects.filter(user=self.user).count() == 1

    def test_sink_notify_accepts_string_ids(self) -> None:
        sink = DjangoNotificationSink()
        with patch("apps.notifications.services.publish_event", return_value=False):
            async_to_sync(sink.notify)(
                str(self.user.id), "match", "New Match! 🎉", "You matched with someone (70% compatibility)", {}
            )

        notification = Notification.objects.get(user=self.user)
        assert notification.message == "You matched with someone (70% compatibility)"
        assert notification.is_read is False
