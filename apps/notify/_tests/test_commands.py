from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings

from apps.notify.models import NotificationChannel


class ListNotifyDriversCommandTests(TestCase):
    @override_settings(NOTIFY_SKIP=["slack"], NOTIFY_SKIP_ALL=False)
    def test_lists_drivers_and_channels(self):
        NotificationChannel.objects.create(name="ops-telegram", driver="telegram")
        out = StringIO()

        call_command("list_notify_drivers", "--verbose", stdout=out)

        output = out.getvalue()
        self.assertIn("telegram", output)
        self.assertIn("bot_token", output)
        self.assertIn("skipped", output)
        self.assertIn("ops-telegram (telegram)", output)
