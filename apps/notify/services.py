"""Notification dispatch for incident changes.

NotificationDispatcher turns a canonical event plus a notify kind
("new", "changed", "resolved") into a NotificationMessage and fans it out to
the console driver and every active NotificationChannel. Delivery runs after
the surrounding transaction commits: on a Celery worker when
NOTIFY_USE_CELERY is set and the broker accepts the task, on a local thread
pool otherwise. A slow or broken channel never blocks or rolls back incident
persistence.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.incidents.exceptions import NotificationDeliveryError
from apps.notify.drivers import NotificationMessage, get_driver, is_notify_enabled
from apps.notify.models import NotificationChannel
from apps.notify.templating import render_template

logger = logging.getLogger(__name__)

# Incident severity -> notification severity
SEVERITY_MAP = {
    "critical": "critical",
    "major": "warning",
    "minor": "warning",
}

TITLES = {
    "new": "New Incident",
    "changed": "Status Change",
    "resolved": "Incident Resolved",
}

_executor: ThreadPoolExecutor | None = None


def _fallback_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        workers = getattr(settings, "NOTIFY_FALLBACK_WORKERS", 4)
        _executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notify")
    return _executor


class NotificationDispatcher:
    """Builds and delivers incident notifications."""

    def build_message(self, event, kind: str) -> NotificationMessage:
        if kind == "resolved":
            severity = "success"
        else:
            severity = SEVERITY_MAP.get(event.severity, "info")

        context: dict[str, Any] = {
            "kind": kind,
            "provider": event.provider,
            "service_id": event.service_id,
            "product": event.product_name,
            "status": event.status,
            "incident_severity": event.severity,
            "status_message": event.message,
            "url": event.url,
            "affected_components": list(event.affected_components),
            "timestamp": timezone.localtime(event.observed_at).strftime("%Y-%m-%d %H:%M:%S"),
        }
        body = render_template(f"file:message_{kind}.j2", context) if kind in TITLES else None

        return NotificationMessage(
            title=f"{TITLES.get(kind, 'Status Update')}: {event.product_name}",
            message=body or event.message,
            severity=severity,
            tags={"provider": event.provider, "kind": kind},
            context=context,
        )

    def dispatch(self, event, kind: str) -> None:
        """Schedule delivery once the current transaction commits."""
        message = self.build_message(event, kind)
        if message.severity == "critical":
            logger.warning(
                "Critical incident for %s (%s): %s",
                event.product_name,
                event.provider,
                event.message,
            )
        payload = message.to_dict()
        transaction.on_commit(lambda: self._enqueue(payload))

    def _enqueue(self, payload: dict[str, Any]) -> None:
        if not getattr(settings, "NOTIFY_USE_CELERY", False):
            _fallback_executor().submit(self._deliver_safely, payload)
            return

        from apps.notify.tasks import deliver_notification

        try:
            deliver_notification.delay(payload)
        except Exception as e:
            logger.warning("Notification queue unavailable (%s), delivering in-process", e)
            _fallback_executor().submit(self._deliver_safely, payload)

    def _deliver_safely(self, payload: dict[str, Any]) -> None:
        try:
            self.deliver(NotificationMessage.from_dict(payload))
        except Exception:
            logger.exception("In-process notification delivery failed")

    def deliver(self, message: NotificationMessage) -> dict[str, dict[str, Any]]:
        """Send one message to the console and each subscribed active channel.

        Each target is isolated: a failing channel is logged and the rest
        still receive the message.
        """
        results: dict[str, dict[str, Any]] = {}
        kind = message.context.get("kind")
        targets: list[tuple[str, str, dict[str, Any]]] = []

        if is_notify_enabled("console"):
            targets.append(("console", "console", {}))
        for channel in NotificationChannel.objects.filter(is_active=True).order_by("name"):
            if not is_notify_enabled(channel.driver) or not channel.accepts(kind):
                continue
            targets.append((channel.name, channel.driver, channel.config or {}))

        for label, driver_name, config in targets:
            try:
                driver = get_driver(driver_name)
                result = driver.send(message, config)
            except Exception as e:
                result = {"success": False, "error": str(e)}
            if not result.get("success"):
                error = NotificationDeliveryError(label, result.get("error", "unknown error"))
                logger.error("%s", error)
            results[label] = result

        return results


def send_test_notification(channel: NotificationChannel) -> dict[str, Any]:
    """Send a sample message through one channel, bypassing the skip lists."""
    message = NotificationMessage(
        title="Test Notification",
        message=f"Test message from channel '{channel.name}'",
        severity="info",
        channel=channel.name,
        context={
            "kind": "test",
            "product": "Status Tracker",
            "status": "operational",
            "status_message": "This is a test notification.",
            "provider": "test",
            "timestamp": timezone.localtime().strftime("%Y-%m-%d %H:%M:%S"),
        },
    )
    try:
        return get_driver(channel.driver).send(message, channel.config or {})
    except ValueError as e:
        return {"success": False, "error": str(e)}
