"""Field extraction for Statuspage-style incident and component objects.

Both the webhook path and the polling path call these functions, so an
incident looks the same no matter how it reached us.
"""

from __future__ import annotations

import logging
from datetime import datetime
from datetime import timezone as dt_timezone
from typing import Any

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.incidents.events import CanonicalEvent, ComponentSnapshot

logger = logging.getLogger(__name__)

IMPACT_SEVERITY_MAP = {
    "critical": "critical",
    "major": "major",
    "minor": "minor",
    "maintenance": "maintenance",
}

COMPONENT_STATUS_MAP = {
    "major_outage": "investigating",
    "partial_outage": "investigating",
    "degraded_performance": "degraded",
    "operational": "resolved",
}

COMPONENT_SEVERITY_MAP = {
    "major_outage": "critical",
    "partial_outage": "major",
    "degraded_performance": "minor",
    "operational": "resolved",
}


def map_impact_to_severity(impact: str | None) -> str:
    return IMPACT_SEVERITY_MAP.get((impact or "").strip().lower(), "unknown")


def map_component_status(native_status: str | None) -> str:
    return COMPONENT_STATUS_MAP.get((native_status or "").strip().lower(), "monitoring")


def map_component_severity(native_status: str | None) -> str:
    return COMPONENT_SEVERITY_MAP.get((native_status or "").strip().lower(), "unknown")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning an aware datetime or None."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = parse_datetime(value)
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def latest_update_message(incident: dict[str, Any]) -> str:
    """Body of the first (most recent) entry of ``incident_updates``."""
    updates = incident.get("incident_updates")
    if not isinstance(updates, list) or not updates:
        return ""
    first = updates[0]
    if not isinstance(first, dict):
        return ""
    return str(first.get("body") or "")


def affected_component_names(incident: dict[str, Any]) -> list[str]:
    components = incident.get("components")
    if not isinstance(components, list):
        return []
    names = []
    for component in components:
        if isinstance(component, dict) and component.get("name"):
            names.append(str(component["name"]))
    return names


def incident_to_event(incident: dict[str, Any], provider: str) -> CanonicalEvent:
    """Map a Statuspage incident object into a CanonicalEvent."""
    observed_at = parse_timestamp(incident.get("updated_at")) or parse_timestamp(
        incident.get("created_at")
    )
    return CanonicalEvent(
        provider=provider,
        service_id=str(incident.get("id") or ""),
        product_name=str(incident.get("name") or ""),
        status=str(incident.get("status") or ""),
        message=latest_update_message(incident),
        severity=map_impact_to_severity(incident.get("impact")),
        url=str(incident.get("shortlink") or ""),
        observed_at=observed_at,
        affected_components=affected_component_names(incident),
        kind="incident",
    )


def component_to_event(component: dict[str, Any], provider: str) -> CanonicalEvent:
    """Map a Statuspage component object into a CanonicalEvent."""
    native_status = str(component.get("status") or "")
    return CanonicalEvent(
        provider=provider,
        service_id=str(component.get("id") or ""),
        product_name=str(component.get("name") or ""),
        status=map_component_status(native_status),
        message=f"Component status changed to: {native_status}",
        severity=map_component_severity(native_status),
        observed_at=parse_timestamp(component.get("updated_at")),
        kind="component",
    )


def component_to_snapshot(component: dict[str, Any], provider: str) -> ComponentSnapshot:
    return ComponentSnapshot(
        provider=provider,
        component_id=str(component.get("id") or ""),
        name=str(component.get("name") or ""),
        status=str(component.get("status") or ""),
        description=str(component.get("description") or ""),
        group_id=str(component.get("group_id") or ""),
        position=component.get("position") or 0,
    )
