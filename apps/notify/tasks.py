"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def deliver_notification(message: dict[str, Any]) -> dict[str, bool]:
    """Deliver a serialized NotificationMessage to every enabled target."""
    from apps.notify.drivers import NotificationMessage
    from apps.notify.services import NotificationDispatcher

    results = NotificationDispatcher().deliver(NotificationMessage.from_dict(message))
    delivered = {label: bool(result.get("success")) for label, result in results.items()}
    logger.info("Notification '%s' delivered: %s", message.get("title", ""), delivered)
    return delivered
