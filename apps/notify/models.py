"""
Notification models for storing notification channel configurations.

Delivery itself is fire-and-forget: failures are logged, never persisted.
"""

from django.core.exceptions import ValidationError
from django.db import models


class NotificationKind(models.TextChoices):
    """Incident transitions a channel can subscribe to."""

    NEW = "new", "New incident"
    CHANGED = "changed", "Status change"
    RESOLVED = "resolved", "Resolved"


class NotificationChannel(models.Model):
    """
    Configuration for a notification channel (e.g., Slack workspace, Telegram chat).

    Every active channel receives the incident notifications whose kind it
    subscribes to, in addition to the console driver.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Unique name for this channel (e.g., 'ops-slack', 'oncall-telegram').",
    )
    driver = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Driver type (e.g., 'slack', 'telegram', 'generic').",
    )
    config = models.JSONField(
        default=dict,
        blank=True,
        help_text="Driver-specific configuration (e.g., webhook URL, bot token, chat id, template).",
    )
    kinds = models.JSONField(
        default=list,
        blank=True,
        help_text="Incident transitions to deliver (new, changed, resolved). Empty means all.",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this channel is active and can receive notifications.",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Description of this channel's purpose.",
    )

    # Timestamps
    created_at = models.DateTimeField(
        auto_now_add=True,
    )
    updated_at = models.DateTimeField(
        auto_now=True,
    )

    class Meta:
        ordering = ["name"]

    def clean(self):
        valid = NotificationKind.values
        if not isinstance(self.kinds, list) or any(kind not in valid for kind in self.kinds):
            raise ValidationError({"kinds": f"Expected a list drawn from: {', '.join(valid)}"})

    def accepts(self, kind: str | None) -> bool:
        """Whether a notification of ``kind`` should go to this channel."""
        if not self.kinds or kind is None:
            return True
        return kind in self.kinds

    def __str__(self):
        status = "active" if self.is_active else "inactive"
        return f"{self.name} ({self.driver}) [{status}]"
