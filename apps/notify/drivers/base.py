"""Base driver and data structures for notification delivery.

Drivers handle sending notifications to various platforms (console, Slack,
Telegram, generic HTTP) and normalize the interface for different backends.

Public API:
- NotificationMessage
- BaseNotifyDriver
"""

from __future__ import annotations

import logging
import urllib.error
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any

from apps.notify.templating import build_template_context, render_template

logger = logging.getLogger(__name__)


@dataclass
class NotificationMessage:
    """Standardized notification message format that all drivers handle."""

    # Required fields
    title: str
    message: str
    severity: str  # "critical", "warning", "info", "success"

    # Optional fields with defaults
    channel: str = "default"  # routing/destination identifier
    tags: dict[str, str] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate and normalize fields after initialization."""
        # Normalize severity
        self.severity = (self.severity or "").lower()
        if self.severity not in ("critical", "warning", "info", "success"):
            self.severity = "info"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationMessage":
        return cls(
            title=data.get("title", ""),
            message=data.get("message", ""),
            severity=data.get("severity", "info"),
            channel=data.get("channel", "default"),
            tags=dict(data.get("tags") or {}),
            context=dict(data.get("context") or {}),
        )


class BaseNotifyDriver(ABC):
    """Abstract base class for notification delivery drivers."""

    name: str = "base"

    # Template used when the channel config does not provide one
    default_template: str | None = None

    # Common severity mappings shared across drivers
    SEVERITY_COLORS = {
        "critical": "#dc3545",
        "warning": "#ffc107",
        "info": "#17a2b8",
        "success": "#28a745",
    }

    SEVERITY_EMOJIS = {
        "critical": ":rotating_light:",
        "warning": ":warning:",
        "info": ":information_source:",
        "success": ":white_check_mark:",
    }

    @abstractmethod
    def validate_config(self, config: dict[str, Any]) -> bool:
        """Validate that the driver configuration is valid."""

    @abstractmethod
    def send(self, message: NotificationMessage, config: dict[str, Any]) -> dict[str, Any]:
        """Send a notification and return result metadata.

        Args:
            message: The notification message to send
            config: Driver-specific configuration

        Returns:
            Dictionary with keys like:
            - success: bool
            - message_id: str (if available)
            - error: str (if failed)
            - metadata: dict (any additional info)
        """

    def _render_text(self, message: NotificationMessage, config: dict[str, Any]) -> str:
        """Render the driver's text body.

        Uses config["template"] when present, otherwise the driver's default
        template, and falls back to the plain message text.
        """
        spec = (config or {}).get("template") or self.default_template
        rendered = render_template(spec, build_template_context(message.to_dict()))
        return rendered or message.message or ""

    def _handle_http_error(self, e: urllib.error.HTTPError, service_name: str) -> dict[str, Any]:
        """Handle HTTP errors consistently across drivers."""
        error_body = e.read().decode("utf-8") if e.fp else str(e)
        logger.error(f"{service_name} HTTP error {e.code}: {error_body}")
        return {"success": False, "error": f"{service_name} API error ({e.code}): {error_body}"}

    def _handle_url_error(self, e: urllib.error.URLError, service_name: str) -> dict[str, Any]:
        """Handle URL errors consistently across drivers."""
        logger.error(f"{service_name} URL error: {e.reason}")
        return {"success": False, "error": f"Failed to connect to {service_name}: {e.reason}"}

    def _handle_exception(self, e: Exception, service_name: str, action: str) -> dict[str, Any]:
        """Handle general exceptions consistently across drivers."""
        logger.exception(f"Failed to {action} {service_name}: {e}")
        return {"success": False, "error": f"Failed to {action} {service_name}: {e}"}
