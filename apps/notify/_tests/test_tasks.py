from unittest.mock import patch

from django.test import TestCase

from apps.notify.drivers.base import NotificationMessage
from apps.notify.tasks import deliver_notification


class DeliverNotificationTaskTests(TestCase):
    @patch("apps.notify.services.NotificationDispatcher.deliver")
    def test_rebuilds_message_and_delivers(self, deliver):
        deliver.return_value = {"console": {"success": True}, "slack": {"success": False}}
        payload = NotificationMessage(title="T", message="M", severity="critical").to_dict()

        result = deliver_notification(payload)

        delivered_message = deliver.call_args[0][0]
        self.assertEqual(delivered_message.severity, "critical")
        self.assertEqual(result, {"console": True, "slack": False})
