from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.notify.models import NotificationChannel, NotificationKind


class NotificationChannelTests(TestCase):
    def test_notification_channel_crud(self):
        ch = NotificationChannel.objects.create(name="ops-telegram", driver="telegram", config={})
        self.assertIsNotNone(ch.pk)
        self.assertTrue(ch.is_active)
        self.assertEqual(ch.kinds, [])
        self.assertEqual(str(ch), "ops-telegram (telegram) [active]")

    def test_inactive_str(self):
        ch = NotificationChannel.objects.create(name="old", driver="slack", is_active=False)
        self.assertTrue(str(ch).endswith("[inactive]"))

    def test_empty_kinds_accepts_everything(self):
        ch = NotificationChannel(name="all", driver="slack")
        for kind in NotificationKind.values:
            self.assertTrue(ch.accepts(kind))

    def test_kinds_filter(self):
        ch = NotificationChannel(name="resolutions", driver="slack", kinds=["resolved"])

        self.assertTrue(ch.accepts("resolved"))
        self.assertFalse(ch.accepts("new"))
        self.assertFalse(ch.accepts("changed"))
        self.assertTrue(ch.accepts(None))

    def test_clean_rejects_unknown_kind(self):
        ch = NotificationChannel(name="bad", driver="slack", kinds=["new", "reopened"])
        with self.assertRaises(ValidationError) as ctx:
            ch.full_clean()
        self.assertIn("kinds", ctx.exception.message_dict)

    def test_clean_rejects_non_list(self):
        ch = NotificationChannel(name="bad", driver="slack", kinds={"new": True})
        with self.assertRaises(ValidationError):
            ch.clean()
