"""Custom admin site for the status tracker ops console."""

import json

from django.contrib.admin import AdminSite
from django.utils.html import format_html


def prettify_json(value) -> str:
    """Render a JSON-serializable value as an indented <pre> block."""
    if value in (None, "", {}, []):
        return "-"
    try:
        text = json.dumps(value, indent=2, sort_keys=True, default=str)
    except (TypeError, ValueError):
        text = str(value)
    return format_html('<pre style="white-space: pre-wrap; margin: 0;">{}</pre>', text)


class StatusTrackerAdminSite(AdminSite):
    site_header = "Status Tracker"
    site_title = "Status Tracker"
    index_title = "Incident history"

    def index(self, request, extra_context=None):
        extra_context = extra_context or {}
        extra_context.update(self._get_dashboard_context())
        return super().index(request, extra_context=extra_context)

    def _get_dashboard_context(self):
        from apps.incidents.models import Component, IncidentLog, PollingFallback

        return {
            "active_incident_count": IncidentLog.objects.unresolved().count(),
            "degraded_component_count": Component.objects.degraded().count(),
            "polling_fallbacks_enabled": list(
                PollingFallback.objects.filter(enabled=True).values_list("provider", flat=True)
            ),
        }
