"""
URL configuration for the incidents app.
"""

from django.urls import path

from apps.incidents.views import (
    ActiveIncidentsView,
    HealthView,
    IncidentDetailView,
    IncidentsByProviderView,
    LivenessView,
    ProvidersHealthView,
    ReadinessView,
    RecentIncidentsView,
    StatusWebhookView,
    SystemStatusView,
)

app_name = "incidents"

urlpatterns = [
    # Provider webhooks
    path("webhook/<str:provider>/", StatusWebhookView.as_view(), name="webhook"),

    # Query surface
    path("status/active/", ActiveIncidentsView.as_view(), name="active"),
    path("status/recent/", RecentIncidentsView.as_view(), name="recent"),
    path(
        "status/<str:provider>/<str:incident_id>/",
        IncidentDetailView.as_view(),
        name="incident_detail",
    ),

    # Health
    path("health/", HealthView.as_view(), name="health"),
    path("health/providers/", ProvidersHealthView.as_view(), name="health_providers"),
    path("health/system/", SystemStatusView.as_view(), name="health_system"),
    path(
        "health/incidents-by-provider/",
        IncidentsByProviderView.as_view(),
        name="health_incidents_by_provider",
    ),
    path("health/live/", LivenessView.as_view(), name="health_live"),
    path("health/ready/", ReadinessView.as_view(), name="health_ready"),
]
