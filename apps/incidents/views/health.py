"""Health and readiness endpoints."""

from django.utils import timezone
from django.views import View

from apps.incidents.services import IncidentQueryService
from apps.incidents.views._mixins import JSONResponseMixin
from apps.providers.registry import get_registry

SERVICE_NAME = "Status Tracker"
SERVICE_VERSION = "1.0.0"


class HealthView(JSONResponseMixin, View):
    """
    Liveness of the application itself.

    GET /health/
    """

    def get(self, request):
        return self.json_response(
            {
                "status": "UP",
                "service": SERVICE_NAME,
                "version": SERVICE_VERSION,
                "timestamp": timezone.now().isoformat(),
            }
        )


class ProvidersHealthView(JSONResponseMixin, View):
    """
    Connectivity of every registered provider.

    GET /health/providers/
    """

    def get(self, request):
        registry = get_registry()
        return self.json_response(
            {
                "total_providers": registry.count(),
                "providers": registry.health(),
                "timestamp": timezone.now().isoformat(),
            }
        )


class SystemStatusView(JSONResponseMixin, View):
    """
    HEALTHY when nothing is open, DEGRADED otherwise.

    GET /health/system/
    """

    def get(self, request):
        incidents = [incident.to_dict() for incident in IncidentQueryService().active_incidents()]
        return self.json_response(
            {
                "status": "DEGRADED" if incidents else "HEALTHY",
                "active_incidents": len(incidents),
                "incidents": incidents,
                "timestamp": timezone.now().isoformat(),
            }
        )


class IncidentsByProviderView(JSONResponseMixin, View):
    """
    Incidents updated in the trailing window, counted per registered provider.

    GET /health/incidents-by-provider/?hours=<n>
    """

    def get(self, request):
        try:
            hours = self.int_param(request, "hours", default=24)
        except ValueError as e:
            return self.error_response(f"Invalid hours: {e}")

        counts = IncidentQueryService().incident_counts_by_provider(
            get_registry().names(), hours=hours
        )
        return self.json_response(
            {
                "hours": hours,
                "incident_counts": counts,
                "timestamp": timezone.now().isoformat(),
            }
        )


class LivenessView(JSONResponseMixin, View):
    """GET /health/live/"""

    def get(self, request):
        return self.json_response({"status": "LIVE"})


class ReadinessView(JSONResponseMixin, View):
    """
    Ready once at least one provider is registered.

    GET /health/ready/
    """

    def get(self, request):
        if get_registry().count() == 0:
            return self.json_response({"status": "NOT_READY"}, status=503)
        return self.json_response({"status": "READY"})
