"""Read-only incident endpoints."""

from django.views import View

from apps.incidents.services import IncidentQueryService
from apps.incidents.views._mixins import JSONResponseMixin


class ActiveIncidentsView(JSONResponseMixin, View):
    """
    Currently unresolved incidents, most recently updated first.

    GET /status/active/?provider=<name>
    """

    def get(self, request):
        incidents = IncidentQueryService().active_incidents(provider=request.GET.get("provider"))
        data = [incident.to_dict() for incident in incidents]
        return self.json_response({"count": len(data), "incidents": data})


class RecentIncidentsView(JSONResponseMixin, View):
    """
    Incidents for one provider updated within a trailing window.

    GET /status/recent/?provider=<name>&hours=<n>
    """

    def get(self, request):
        provider = (request.GET.get("provider") or "").strip()
        if not provider:
            return self.error_response("provider query parameter is required")
        try:
            hours = self.int_param(request, "hours", default=24)
        except ValueError as e:
            return self.error_response(f"Invalid hours: {e}")

        incidents = IncidentQueryService().recent_incidents(provider, hours=hours)
        data = [incident.to_dict() for incident in incidents]
        return self.json_response(
            {
                "provider": provider.lower(),
                "hours": hours,
                "count": len(data),
                "incidents": data,
            }
        )


class IncidentDetailView(JSONResponseMixin, View):
    """
    One incident with its status history.

    GET /status/<provider>/<incident_id>/
    """

    def get(self, request, provider, incident_id):
        queries = IncidentQueryService()
        incident = queries.get_incident(provider, incident_id)
        if incident is None:
            return self.error_response("Incident not found", status=404)

        history = [
            {
                "previous_status": entry.previous_status,
                "current_status": entry.current_status,
                "changed_at": entry.changed_at.isoformat(),
            }
            for entry in queries.status_history(incident_id, provider=provider)
        ]
        return self.json_response({"incident": incident, "history": history})
