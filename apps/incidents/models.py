"""
Incident, audit, component and polling-control models.

Uniqueness of ``(incident_id, provider)`` and ``(component_id, provider)`` is
enforced by the database, not by application locks: webhook handlers and the
polling cycle may race to create the same row.
"""

from django.db import models
from django.utils import timezone


def _iso(value):
    return value.isoformat() if value else None


class IncidentStatus(models.TextChoices):
    """Closed status vocabulary for incidents."""

    INVESTIGATING = "investigating", "Investigating"
    IDENTIFIED = "identified", "Identified"
    MONITORING = "monitoring", "Monitoring"
    RESOLVED = "resolved", "Resolved"
    DEGRADED = "degraded", "Degraded"
    OPERATIONAL = "operational", "Operational"


class IncidentSeverity(models.TextChoices):
    CRITICAL = "critical", "Critical"
    MAJOR = "major", "Major"
    MINOR = "minor", "Minor"
    MAINTENANCE = "maintenance", "Maintenance"
    RESOLVED = "resolved", "Resolved"
    UNKNOWN = "unknown", "Unknown"


class IncidentLogQuerySet(models.QuerySet):
    def unresolved(self):
        return self.filter(resolved_at__isnull=True).exclude(status=IncidentStatus.RESOLVED)

    def for_provider(self, provider: str):
        return self.filter(provider=(provider or "").lower())

    def updated_since(self, since):
        return self.filter(updated_at__gte=since)


class IncidentLog(models.Model):
    """
    One canonical record per logical incident, keyed by (incident_id, provider).

    Created on the first sighting of a key and mutated by every accepted
    transition. ``updated_at`` is written explicitly by the lifecycle manager
    because change detection reads it.
    """

    incident_id = models.CharField(
        max_length=255,
        help_text="Provider-scoped identifier of the incident or component.",
    )
    provider = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Registered provider name (lower-case).",
    )
    service_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Display name of the incident or component.",
    )
    status = models.CharField(
        max_length=20,
        choices=IncidentStatus.choices,
        default=IncidentStatus.INVESTIGATING,
        db_index=True,
    )
    status_message = models.TextField(
        blank=True,
        default="",
        help_text="Most recent update message.",
    )
    severity = models.CharField(
        max_length=20,
        choices=IncidentSeverity.choices,
        default=IncidentSeverity.UNKNOWN,
    )
    incident_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
    )
    affected_components = models.JSONField(
        default=list,
        blank=True,
        help_text="Names of affected components (informational).",
    )
    content_fingerprint = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="SHA-256 of incident_id|status|message, kept for diagnostics.",
    )

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)
    resolved_at = models.DateTimeField(null=True, blank=True)
    observed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the provider asserted the latest accepted update.",
    )

    objects = IncidentLogQuerySet.as_manager()

    class Meta:
        db_table = "incident_logs"
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["incident_id", "provider"],
                name="uniq_incident_per_provider",
            ),
        ]
        indexes = [
            models.Index(fields=["provider", "created_at"], name="incident_lo_provide_5b0c1e_idx"),
            models.Index(fields=["service_name", "status"], name="incident_lo_service_8d2a4f_idx"),
        ]

    def __str__(self):
        return f"[{self.provider}] {self.service_name or self.incident_id} ({self.status})"

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None or self.status == IncidentStatus.RESOLVED

    @property
    def duration(self):
        end = self.resolved_at or timezone.now()
        return end - self.created_at

    def to_dict(self) -> dict:
        """Plain-dict view used by the cache and the JSON endpoints."""
        return {
            "incident_id": self.incident_id,
            "provider": self.provider,
            "service_name": self.service_name,
            "status": self.status,
            "status_message": self.status_message,
            "severity": self.severity,
            "incident_url": self.incident_url,
            "affected_components": list(self.affected_components or []),
            "content_fingerprint": self.content_fingerprint,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "resolved_at": _iso(self.resolved_at),
        }


class StatusChangeLog(models.Model):
    """
    Append-only audit trail of accepted status transitions.

    Rows are written only by the lifecycle manager and never updated.
    """

    service_id = models.CharField(max_length=255)
    service_name = models.CharField(max_length=255, blank=True, default="")
    previous_status = models.CharField(max_length=20, blank=True, default="")
    current_status = models.CharField(max_length=20)
    provider = models.CharField(max_length=100, db_index=True)
    changed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "status_change_logs"
        ordering = ["-changed_at"]
        indexes = [
            models.Index(fields=["service_id", "changed_at"], name="status_chan_service_3e7f90_idx"),
        ]

    def __str__(self):
        return f"{self.service_id}: {self.previous_status} -> {self.current_status}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("StatusChangeLog entries are immutable")
        super().save(*args, **kwargs)


class ComponentQuerySet(models.QuerySet):
    def degraded(self):
        return self.exclude(current_status="operational")

    def for_provider(self, provider: str):
        return self.filter(provider=(provider or "").lower())


class Component(models.Model):
    """
    Slowly-changing health record for a provider sub-component.

    ``version`` is an optimistic-lock counter; writers update with
    ``WHERE version = <read version>`` and retry when no row matched.
    """

    component_id = models.CharField(max_length=255)
    provider = models.CharField(max_length=100, db_index=True)
    name = models.CharField(max_length=255)
    current_status = models.CharField(
        max_length=50,
        default="operational",
        db_index=True,
        help_text="Native provider status, e.g. 'degraded_performance'.",
    )
    description = models.TextField(blank=True, default="")
    group_id = models.CharField(max_length=255, blank=True, default="")
    position = models.IntegerField(default=0)
    last_checked_at = models.DateTimeField(default=timezone.now)
    version = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ComponentQuerySet.as_manager()

    class Meta:
        db_table = "component_registry"
        ordering = ["provider", "position", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["component_id", "provider"],
                name="uniq_component_per_provider",
            ),
        ]

    def __str__(self):
        return f"[{self.provider}] {self.name} ({self.current_status})"

    @property
    def is_operational(self) -> bool:
        return self.current_status == "operational"

    def to_dict(self) -> dict:
        return {
            "component_id": self.component_id,
            "provider": self.provider,
            "name": self.name,
            "current_status": self.current_status,
            "description": self.description,
            "position": self.position,
            "version": self.version,
            "last_checked_at": _iso(self.last_checked_at),
        }


class PollingFallback(models.Model):
    """
    Per-provider switch for the polling fallback.

    A provider without a row follows ``settings.POLLING_ENABLED``.
    """

    provider = models.CharField(max_length=100, unique=True)
    enabled = models.BooleanField(default=False)
    reason = models.CharField(max_length=500, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "polling_fallback"
        ordering = ["provider"]

    def __str__(self):
        state = "enabled" if self.enabled else "disabled"
        return f"{self.provider} polling {state}"
