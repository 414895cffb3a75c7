"""Telegram notification driver."""

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from apps.notify.drivers.base import BaseNotifyDriver, NotificationMessage

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramNotifyDriver(BaseNotifyDriver):
    """Driver for sending messages through the Telegram Bot API (sendMessage)."""

    name = "telegram"
    default_template = "file:telegram_text.j2"

    def validate_config(self, config: dict[str, Any]) -> bool:
        token = config.get("bot_token")
        chat_id = config.get("chat_id")
        return bool(token) and isinstance(token, str) and chat_id not in (None, "")

    def send(self, message: NotificationMessage, config: dict[str, Any]) -> dict[str, Any]:
        if not self.validate_config(config):
            return {
                "success": False,
                "error": "Invalid Telegram configuration (bot_token and chat_id required)",
            }

        api_base = config.get("api_base", TELEGRAM_API_BASE).rstrip("/")
        url = f"{api_base}/bot{config['bot_token']}/sendMessage"
        timeout = config.get("timeout", 30)

        try:
            payload = {
                "chat_id": config["chat_id"],
                "text": self._render_text(message, config),
                "parse_mode": config.get("parse_mode", "Markdown"),
                "disable_web_page_preview": True,
            }
            request = urllib.request.Request(
                url,
                data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers={"Content-Type": "application/json"},
                method="POST",
            )

            with urllib.request.urlopen(request, timeout=timeout) as response:
                body = json.loads(response.read().decode("utf-8") or "{}")

            if not body.get("ok"):
                description = body.get("description", "unknown error")
                logger.warning(f"Telegram rejected message: {description}")
                return {"success": False, "error": f"Telegram API error: {description}"}

            message_id = (body.get("result") or {}).get("message_id")
            logger.info(f"Telegram notification sent: {message.title}")
            return {
                "success": True,
                "message_id": f"telegram_{message_id}",
                "metadata": {"chat_id": config["chat_id"]},
            }

        except urllib.error.HTTPError as e:
            return self._handle_http_error(e, "Telegram")
        except urllib.error.URLError as e:
            return self._handle_url_error(e, "Telegram")
        except Exception as e:
            return self._handle_exception(e, "Telegram", "send notification to")
