"""Console notification driver."""

import logging
from typing import Any

from django.utils import timezone

from apps.notify.drivers.base import BaseNotifyDriver, NotificationMessage

logger = logging.getLogger(__name__)


class ConsoleNotifyDriver(BaseNotifyDriver):
    """
    Writes notifications to the application log.

    Needs no configuration and is always part of the fan-out unless skipped
    through NOTIFY_SKIP.
    """

    name = "console"

    PREFIXES = {
        "new": "NEW INCIDENT",
        "changed": "STATUS CHANGE",
        "resolved": "RESOLVED",
    }

    def validate_config(self, config: dict[str, Any]) -> bool:
        return True

    def send(self, message: NotificationMessage, config: dict[str, Any]) -> dict[str, Any]:
        kind = message.context.get("kind", "")
        prefix = self.PREFIXES.get(kind, message.title)
        timestamp = timezone.localtime().strftime("%Y-%m-%d %H:%M:%S")
        logger.info("[%s] %s - %s", timestamp, prefix, self._render_text(message, config))
        return {"success": True, "metadata": {"prefix": prefix}}
