"""
Incident app views.

Views are organized by endpoint/functionality.
"""

from apps.incidents.views.health import (
    HealthView,
    IncidentsByProviderView,
    LivenessView,
    ProvidersHealthView,
    ReadinessView,
    SystemStatusView,
)
from apps.incidents.views.status import ActiveIncidentsView, IncidentDetailView, RecentIncidentsView
from apps.incidents.views.webhook import StatusWebhookView

__all__ = [
    "ActiveIncidentsView",
    "HealthView",
    "IncidentDetailView",
    "IncidentsByProviderView",
    "LivenessView",
    "ProvidersHealthView",
    "ReadinessView",
    "RecentIncidentsView",
    "StatusWebhookView",
    "SystemStatusView",
]
