"""Tests for CanonicalEvent and ComponentSnapshot normalization."""

from django.test import SimpleTestCase

from apps.incidents.events import (
    CanonicalEvent,
    ComponentSnapshot,
    normalize_severity,
    normalize_status,
)


class NormalizeStatusTests(SimpleTestCase):
    def test_known_values_pass_through_lowercased(self):
        self.assertEqual(normalize_status("Investigating"), "investigating")
        self.assertEqual(normalize_status(" RESOLVED "), "resolved")

    def test_aliases_fold_into_closed_set(self):
        self.assertEqual(normalize_status("postmortem"), "resolved")
        self.assertEqual(normalize_status("degraded_performance"), "degraded")
        self.assertEqual(normalize_status("scheduled"), "monitoring")

    def test_unknown_and_empty_map_to_monitoring(self):
        self.assertEqual(normalize_status("something-new"), "monitoring")
        self.assertEqual(normalize_status(""), "monitoring")
        self.assertEqual(normalize_status(None), "monitoring")


class NormalizeSeverityTests(SimpleTestCase):
    def test_known_severity(self):
        self.assertEqual(normalize_severity("Critical"), "critical")
        self.assertEqual(normalize_severity("resolved"), "resolved")

    def test_unknown_severity(self):
        self.assertEqual(normalize_severity("catastrophic"), "unknown")
        self.assertEqual(normalize_severity(None), "unknown")


class CanonicalEventTests(SimpleTestCase):
    def test_post_init_normalizes_fields(self):
        event = CanonicalEvent(provider=" OpenAI ", service_id=" inc-1 ", status="Identified")

        self.assertEqual(event.provider, "openai")
        self.assertEqual(event.service_id, "inc-1")
        self.assertEqual(event.status, "identified")
        self.assertEqual(event.product_name, "inc-1")
        self.assertEqual(event.severity, "unknown")
        self.assertIsNotNone(event.observed_at)

    def test_key_and_resolved(self):
        event = CanonicalEvent(provider="openai", service_id="inc-1", status="resolved")
        self.assertEqual(event.key, ("inc-1", "openai"))
        self.assertTrue(event.is_resolved)

    def test_to_dict_is_serializable(self):
        event = CanonicalEvent(
            provider="openai",
            service_id="inc-1",
            status="investigating",
            product_name="API",
            affected_components=["Chat"],
        )
        data = event.to_dict()

        self.assertEqual(data["product_name"], "API")
        self.assertEqual(data["affected_components"], ["Chat"])
        self.assertIsInstance(data["observed_at"], str)


class ComponentSnapshotTests(SimpleTestCase):
    def test_post_init(self):
        snapshot = ComponentSnapshot(
            provider="OpenAI",
            component_id="c1",
            name="API",
            status="Degraded_Performance",
            position="3",
        )
        self.assertEqual(snapshot.provider, "openai")
        self.assertEqual(snapshot.status, "degraded_performance")
        self.assertEqual(snapshot.position, 3)
        self.assertIsNotNone(snapshot.checked_at)

    def test_bad_position_defaults_to_zero(self):
        snapshot = ComponentSnapshot(provider="p", component_id="c", name="n", status="x", position="top")
        self.assertEqual(snapshot.position, 0)
