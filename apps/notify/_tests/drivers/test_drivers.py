"""Tests for the console, Slack, Telegram and generic drivers."""

import json
import urllib.error
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase, override_settings

from apps.notify.drivers import (
    DRIVER_REGISTRY,
    ConsoleNotifyDriver,
    GenericNotifyDriver,
    SlackNotifyDriver,
    TelegramNotifyDriver,
    get_driver,
    is_notify_enabled,
)
from apps.notify.drivers.base import NotificationMessage

VALID_WEBHOOK = "https://hooks.slack.com/services/T00/B00/xxx"


def _make_msg(**kwargs):
    defaults = {
        "title": "New Incident: ChatGPT",
        "message": "Product: ChatGPT | Status: INVESTIGATING",
        "severity": "warning",
        "context": {
            "kind": "new",
            "product": "ChatGPT",
            "status": "investigating",
            "status_message": "Elevated errors",
            "provider": "openai",
            "timestamp": "2026-03-01 12:00:00",
            "url": "https://stspg.io/x",
        },
    }
    defaults.update(kwargs)
    return NotificationMessage(**defaults)


def _mock_urlopen(body="ok", status_code=200):
    mock_resp = MagicMock()
    mock_resp.read.return_value = body.encode("utf-8")
    mock_resp.getcode.return_value = status_code
    mock_resp.__enter__ = MagicMock(return_value=mock_resp)
    mock_resp.__exit__ = MagicMock(return_value=False)
    return mock_resp


def _sent_payload(mock_urlopen):
    request = mock_urlopen.call_args[0][0]
    return request, json.loads(request.data.decode("utf-8"))


class RegistryTests(SimpleTestCase):
    def test_registry_contents(self):
        self.assertEqual(set(DRIVER_REGISTRY), {"console", "slack", "telegram", "generic"})
        self.assertIsInstance(get_driver("telegram"), TelegramNotifyDriver)

    def test_unknown_driver(self):
        with self.assertRaises(ValueError):
            get_driver("email")

    @override_settings(NOTIFY_SKIP=["slack"], NOTIFY_SKIP_ALL=False)
    def test_skip_list(self):
        self.assertFalse(is_notify_enabled("slack"))
        self.assertTrue(is_notify_enabled("telegram"))

    @override_settings(NOTIFY_SKIP_ALL=True)
    def test_skip_all(self):
        self.assertFalse(any(is_notify_enabled(name) for name in DRIVER_REGISTRY))


class ConsoleDriverTests(SimpleTestCase):
    def test_logs_prefixed_line(self):
        with self.assertLogs("apps.notify.drivers.console", level="INFO") as logs:
            result = ConsoleNotifyDriver().send(_make_msg(), {})

        self.assertTrue(result["success"])
        self.assertIn("NEW INCIDENT - Product: ChatGPT | Status: INVESTIGATING", logs.output[0])

    def test_resolved_prefix(self):
        msg = _make_msg(context={"kind": "resolved"})
        result = ConsoleNotifyDriver().send(msg, {})
        self.assertEqual(result["metadata"]["prefix"], "RESOLVED")


class SlackDriverTests(SimpleTestCase):
    def setUp(self):
        self.driver = SlackNotifyDriver()

    def test_validate_config(self):
        self.assertFalse(self.driver.validate_config({}))
        self.assertFalse(self.driver.validate_config({"webhook_url": "https://example.com/hook"}))
        self.assertTrue(self.driver.validate_config({"webhook_url": VALID_WEBHOOK}))

    def test_invalid_config(self):
        result = self.driver.send(_make_msg(), {})
        self.assertIn("Invalid Slack configuration", result["error"])

    @patch("apps.notify.drivers.slack.urllib.request.urlopen")
    def test_send(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen("ok")

        result = self.driver.send(_make_msg(), {"webhook_url": VALID_WEBHOOK, "channel": "#status"})

        self.assertTrue(result["success"])
        request, payload = _sent_payload(mock_urlopen)
        self.assertEqual(request.full_url, VALID_WEBHOOK)
        self.assertTrue(payload["text"].startswith("*New Incident: ChatGPT*"))
        self.assertIn("<https://stspg.io/x|View on status page>", payload["text"])
        self.assertEqual(payload["channel"], "#status")
        self.assertEqual(payload["attachments"][0]["color"], "#ffc107")

    @patch("apps.notify.drivers.slack.urllib.request.urlopen")
    def test_unexpected_response(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen("invalid_token")

        result = self.driver.send(_make_msg(), {"webhook_url": VALID_WEBHOOK})

        self.assertFalse(result["success"])

    @patch("apps.notify.drivers.slack.urllib.request.urlopen")
    def test_url_error(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("refused")

        result = self.driver.send(_make_msg(), {"webhook_url": VALID_WEBHOOK})

        self.assertIn("Failed to connect to Slack", result["error"])


class TelegramDriverTests(SimpleTestCase):
    def setUp(self):
        self.driver = TelegramNotifyDriver()
        self.config = {"bot_token": "123:abc", "chat_id": "-100"}

    def test_validate_config(self):
        self.assertFalse(self.driver.validate_config({"bot_token": "x"}))
        self.assertFalse(self.driver.validate_config({"chat_id": "1"}))
        self.assertTrue(self.driver.validate_config(self.config))

    @patch("apps.notify.drivers.telegram.urllib.request.urlopen")
    def test_send(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen(json.dumps({"ok": True, "result": {"message_id": 9}}))

        result = self.driver.send(_make_msg(), self.config)

        self.assertTrue(result["success"])
        self.assertEqual(result["message_id"], "telegram_9")
        request, payload = _sent_payload(mock_urlopen)
        self.assertEqual(request.full_url, "https://api.telegram.org/bot123:abc/sendMessage")
        self.assertEqual(payload["chat_id"], "-100")
        self.assertEqual(payload["parse_mode"], "Markdown")
        self.assertIn("*Product:* ChatGPT", payload["text"])
        self.assertIn("*Provider:* OPENAI", payload["text"])

    @patch("apps.notify.drivers.telegram.urllib.request.urlopen")
    def test_api_rejection(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen(json.dumps({"ok": False, "description": "chat not found"}))

        result = self.driver.send(_make_msg(), self.config)

        self.assertFalse(result["success"])
        self.assertIn("chat not found", result["error"])


class GenericDriverTests(SimpleTestCase):
    def setUp(self):
        self.driver = GenericNotifyDriver()

    def test_validate_config(self):
        self.assertFalse(self.driver.validate_config({}))
        self.assertFalse(self.driver.validate_config({"endpoint": "ftp://x"}))
        self.assertTrue(self.driver.validate_config({"endpoint": "https://hooks.example.com"}))

    @patch("apps.notify.drivers.generic.urllib.request.urlopen")
    def test_send_message_as_json(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen('{"received": true}')

        result = self.driver.send(
            _make_msg(), {"endpoint": "https://hooks.example.com", "headers": {"X-Token": "t"}}
        )

        self.assertTrue(result["success"])
        self.assertEqual(result["metadata"]["response"], {"received": True})
        request, payload = _sent_payload(mock_urlopen)
        self.assertEqual(payload["title"], "New Incident: ChatGPT")
        self.assertEqual(request.get_header("X-token"), "t")

    @patch("apps.notify.drivers.generic.urllib.request.urlopen")
    def test_payload_template(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen("accepted")
        config = {
            "endpoint": "https://hooks.example.com",
            "payload_template": '{"product": "{{ product }}", "level": "{{ severity }}"}',
        }

        result = self.driver.send(_make_msg(), config)

        _, payload = _sent_payload(mock_urlopen)
        self.assertEqual(payload, {"product": "ChatGPT", "level": "warning"})
        self.assertEqual(result["metadata"]["response"], {"raw": "accepted"})
