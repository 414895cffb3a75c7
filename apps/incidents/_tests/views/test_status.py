from datetime import timedelta

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.incidents.events import CanonicalEvent
from apps.incidents.services import IncidentLifecycleManager


def _apply(service_id, status="investigating", provider="openai", message="m", now=None):
    IncidentLifecycleManager().apply(
        CanonicalEvent(provider=provider, service_id=service_id, status=status, message=message),
        now=now or timezone.now(),
    )


class ActiveIncidentsViewTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_lists_unresolved(self):
        _apply("a")
        _apply("b", status="resolved")

        response = self.client.get(reverse("incidents:active"))

        data = response.json()
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["incidents"][0]["incident_id"], "a")

    def test_filters_by_provider(self):
        _apply("a", provider="openai")
        _apply("b", provider="other")

        response = self.client.get(reverse("incidents:active"), {"provider": "other"})

        self.assertEqual([i["incident_id"] for i in response.json()["incidents"]], ["b"])


class RecentIncidentsViewTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_requires_provider(self):
        response = self.client.get(reverse("incidents:recent"))
        self.assertEqual(response.status_code, 400)

    def test_rejects_bad_hours(self):
        url = reverse("incidents:recent")
        self.assertEqual(self.client.get(url, {"provider": "openai", "hours": "abc"}).status_code, 400)
        self.assertEqual(self.client.get(url, {"provider": "openai", "hours": "0"}).status_code, 400)

    def test_window(self):
        _apply("old", now=timezone.now() - timedelta(hours=10))
        _apply("new")

        response = self.client.get(reverse("incidents:recent"), {"provider": "openai", "hours": "2"})

        data = response.json()
        self.assertEqual(data["hours"], 2)
        self.assertEqual([i["incident_id"] for i in data["incidents"]], ["new"])


class IncidentDetailViewTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_returns_incident_and_history(self):
        now = timezone.now()
        _apply("inc-1", now=now - timedelta(minutes=5))
        _apply("inc-1", status="resolved", message="done", now=now)

        response = self.client.get(
            reverse("incidents:incident_detail", kwargs={"provider": "openai", "incident_id": "inc-1"})
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["incident"]["status"], "resolved")
        self.assertEqual(len(data["history"]), 1)
        self.assertEqual(data["history"][0]["previous_status"], "investigating")

    def test_not_found(self):
        response = self.client.get(
            reverse("incidents:incident_detail", kwargs={"provider": "openai", "incident_id": "missing"})
        )
        self.assertEqual(response.status_code, 404)
