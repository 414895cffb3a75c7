"""Canonical event model.

Every source (webhook push or polling pull) maps provider payloads into a
``CanonicalEvent`` before any processing happens, so change detection never
needs to know where an update came from.

Public API:
- CanonicalEvent
- ComponentSnapshot
- normalize_status
- normalize_severity
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone

# Closed status vocabulary used throughout the incident history.
STATUS_VALUES = (
    "investigating",
    "identified",
    "monitoring",
    "resolved",
    "degraded",
    "operational",
)

RESOLVED_STATUS = "resolved"

# Severity vocabulary. "resolved" is produced only by the component mapping
# (operational components carry no severity).
SEVERITY_VALUES = ("critical", "major", "minor", "maintenance", "resolved", "unknown")

# Statuspage vocabulary outside the closed set, folded into it.
_STATUS_ALIASES = {
    "postmortem": "resolved",
    "completed": "resolved",
    "scheduled": "monitoring",
    "in_progress": "monitoring",
    "verifying": "monitoring",
    "major_outage": "investigating",
    "partial_outage": "investigating",
    "degraded_performance": "degraded",
}


def normalize_status(raw: str | None) -> str:
    """Map any provider status string into the closed status vocabulary."""
    value = (raw or "").strip().lower()
    if value in STATUS_VALUES:
        return value
    return _STATUS_ALIASES.get(value, "monitoring")


def normalize_severity(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    return value if value in SEVERITY_VALUES else "unknown"


@dataclass
class CanonicalEvent:
    """Source-agnostic representation of one status update."""

    # Required fields
    provider: str
    service_id: str
    status: str

    # Optional fields with defaults
    product_name: str = ""
    message: str = ""
    severity: str = "unknown"
    url: str = ""
    observed_at: datetime | None = None
    affected_components: list[str] = field(default_factory=list)
    kind: str = "incident"  # "incident" or "component"

    def __post_init__(self) -> None:
        """Normalize fields after initialization."""
        self.provider = (self.provider or "").strip().lower()
        self.service_id = str(self.service_id or "").strip()
        self.status = normalize_status(self.status)
        self.severity = normalize_severity(self.severity)
        self.message = self.message or ""
        self.product_name = self.product_name or self.service_id
        self.url = self.url or ""
        if self.observed_at is None:
            self.observed_at = timezone.now()

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the logical incident this event describes."""
        return (self.service_id, self.provider)

    @property
    def is_resolved(self) -> bool:
        return self.status == RESOLVED_STATUS

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "provider": self.provider,
            "service_id": self.service_id,
            "product_name": self.product_name,
            "status": self.status,
            "message": self.message,
            "severity": self.severity,
            "url": self.url,
            "observed_at": self.observed_at.isoformat() if self.observed_at else None,
            "affected_components": list(self.affected_components),
            "kind": self.kind,
        }


@dataclass
class ComponentSnapshot:
    """Point-in-time health of one provider sub-component."""

    provider: str
    component_id: str
    name: str
    status: str  # native provider status, e.g. "degraded_performance"
    description: str = ""
    group_id: str = ""
    position: int = 0
    checked_at: datetime | None = None

    def __post_init__(self) -> None:
        self.provider = (self.provider or "").strip().lower()
        self.status = (self.status or "").strip().lower()
        self.description = self.description or ""
        self.group_id = self.group_id or ""
        try:
            self.position = int(self.position or 0)
        except (TypeError, ValueError):
            self.position = 0
        if self.checked_at is None:
            self.checked_at = timezone.now()
