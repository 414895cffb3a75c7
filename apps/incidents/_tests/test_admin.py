import pytest
from django.utils import timezone

from apps.incidents.models import Component, IncidentLog, PollingFallback, StatusChangeLog


@pytest.fixture
def incident(db):
    now = timezone.now()
    return IncidentLog.objects.create(
        incident_id="inc-1",
        provider="openai",
        service_name="ChatGPT",
        status="investigating",
        status_message="Looking into it",
        severity="major",
        created_at=now,
        updated_at=now,
    )


@pytest.mark.django_db
class TestAdminPages:
    def test_index_shows_dashboard(self, admin_client, incident):
        response = admin_client.get("/admin/")
        assert response.status_code == 200
        assert response.context["active_incident_count"] == 1

    def test_incident_list_and_detail(self, admin_client, incident):
        StatusChangeLog.objects.create(
            service_id="inc-1", provider="openai", previous_status="investigating", current_status="identified"
        )
        assert admin_client.get("/admin/incidents/incidentlog/").status_code == 200
        response = admin_client.get(f"/admin/incidents/incidentlog/{incident.pk}/change/")
        assert response.status_code == 200
        assert b"identified" in response.content

    def test_status_change_log_is_read_only(self, admin_client):
        assert admin_client.get("/admin/incidents/statuschangelog/").status_code == 200
        assert admin_client.get("/admin/incidents/statuschangelog/add/").status_code == 403

    def test_component_list(self, admin_client):
        Component.objects.create(component_id="c1", provider="openai", name="API", current_status="major_outage")
        response = admin_client.get("/admin/incidents/component/")
        assert response.status_code == 200
        assert b"MAJOR_OUTAGE" in response.content


@pytest.mark.django_db
class TestAdminActions:
    def test_resolve_incident_action(self, admin_client, incident):
        response = admin_client.get(f"/admin/incidents/incidentlog/{incident.pk}/actions/resolve_incident/")
        assert response.status_code == 302
        incident.refresh_from_db()
        assert incident.status == "resolved"
        assert incident.resolved_at is not None
        assert StatusChangeLog.objects.filter(service_id="inc-1", current_status="resolved").exists()

    def test_bulk_enable_polling(self, admin_client):
        row = PollingFallback.objects.create(provider="openai", enabled=False)
        response = admin_client.post(
            "/admin/incidents/pollingfallback/",
            {"action": "enable_selected", "_selected_action": [row.pk]},
        )
        assert response.status_code == 302
        row.refresh_from_db()
        assert row.enabled is True

    def test_disable_polling_change_action(self, admin_client):
        row = PollingFallback.objects.create(provider="openai", enabled=True)
        response = admin_client.get(f"/admin/incidents/pollingfallback/{row.pk}/actions/disable_polling/")
        assert response.status_code == 302
        row.refresh_from_db()
        assert row.enabled is False
