"""Slack notification driver."""

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from apps.notify.drivers.base import BaseNotifyDriver, NotificationMessage

logger = logging.getLogger(__name__)


class SlackNotifyDriver(BaseNotifyDriver):
    """
    Driver for sending Slack notifications through an incoming webhook.

    The text comes from ``slack_text.j2`` (or the channel's "template"); it is
    sent with a colored attachment carrying the product and status.
    """

    name = "slack"
    default_template = "file:slack_text.j2"

    def validate_config(self, config: dict[str, Any]) -> bool:
        """Validate Slack configuration."""
        if "webhook_url" not in config:
            return False
        url = config["webhook_url"]
        return isinstance(url, str) and url.startswith("https://hooks.slack.com/")

    def _build_payload(self, message: NotificationMessage, config: dict[str, Any]) -> dict[str, Any]:
        context = message.context
        payload: dict[str, Any] = {
            "text": self._render_text(message, config),
            "attachments": [
                {
                    "color": self.SEVERITY_COLORS.get(message.severity, "#6c757d"),
                    "title": context.get("product") or message.title,
                    "text": context.get("status_message") or message.message,
                    "fields": [
                        {"title": "Status", "value": str(context.get("status", "")).upper(), "short": True},
                        {"title": "Provider", "value": str(context.get("provider", "")).upper(), "short": True},
                    ],
                }
            ],
        }
        if config.get("channel"):
            payload["channel"] = config["channel"]
        return payload

    def send(self, message: NotificationMessage, config: dict[str, Any]) -> dict[str, Any]:
        """Send a Slack notification."""
        if not self.validate_config(config):
            return {
                "success": False,
                "error": "Invalid Slack configuration (valid webhook_url required)",
            }

        webhook_url = config["webhook_url"]
        timeout = config.get("timeout", 30)

        try:
            payload = self._build_payload(message, config)
            request = urllib.request.Request(
                webhook_url,
                data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers={"Content-Type": "application/json"},
                method="POST",
            )

            with urllib.request.urlopen(request, timeout=timeout) as response:
                response_body = response.read().decode("utf-8")

                if response_body == "ok":
                    logger.info(f"Slack notification sent: {message.title}")
                    return {
                        "success": True,
                        "message_id": f"slack_{hash(message.title + message.message) & 0x7FFFFFFF:08x}",
                        "metadata": {
                            "channel": payload.get("channel", "default"),
                            "severity": message.severity,
                        },
                    }

                logger.warning(f"Unexpected Slack response: {response_body}")
                return {
                    "success": False,
                    "error": f"Unexpected Slack response: {response_body}",
                }

        except urllib.error.HTTPError as e:
            return self._handle_http_error(e, "Slack")
        except urllib.error.URLError as e:
            return self._handle_url_error(e, "Slack")
        except Exception as e:
            return self._handle_exception(e, "Slack", "send notification to")
