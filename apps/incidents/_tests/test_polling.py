"""Tests for the polling fallback: run guard, controller and orchestrator."""

import json
from unittest.mock import MagicMock, patch

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings

from apps.incidents.events import CanonicalEvent
from apps.incidents.exceptions import ProviderUnavailableError
from apps.incidents.models import IncidentLog, PollingFallback, StatusChangeLog
from apps.incidents.polling import (
    FallbackController,
    PollingOrchestrator,
    RunGuard,
    warn_if_run_guard_is_process_local,
)
from apps.incidents.services import StatusUpdateProcessor
from apps.incidents.webhooks import WebhookIngestor
from apps.providers.registry import ProviderRegistry
from apps.providers.statuspage import GenericStatuspageProvider


def _event(service_id, status="investigating", message="msg"):
    return CanonicalEvent(provider="openai", service_id=service_id, status=status, message=message)


class RunGuardTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_only_one_holder(self):
        first = RunGuard("openai")
        second = RunGuard("openai")

        self.assertTrue(first.acquire())
        self.assertFalse(second.acquire())

        first.release()
        self.assertTrue(second.acquire())
        second.release()

    def test_release_does_not_remove_foreign_token(self):
        holder = RunGuard("openai")
        holder.acquire()
        intruder = RunGuard("openai")
        intruder.acquired = True

        intruder.release()

        self.assertEqual(cache.get(holder.key), holder.token)
        holder.release()

    def test_context_manager(self):
        with RunGuard("openai") as acquired:
            self.assertTrue(acquired)
            self.assertIsNotNone(cache.get("status-tracker:polling-run:openai"))
        self.assertIsNone(cache.get("status-tracker:polling-run:openai"))

    def test_cache_failure_refuses_to_run(self):
        broken = MagicMock()
        broken.add.side_effect = ConnectionError("redis down")
        with patch("apps.incidents.polling.caches", {"default": broken}):
            self.assertFalse(RunGuard("openai").acquire())


LOCMEM = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}
REDIS = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": "redis://localhost:6379/0",
    }
}


class ProcessLocalGuardWarningTests(SimpleTestCase):
    @override_settings(POLLING_ENABLED=True, CACHES=LOCMEM)
    def test_warns_when_polling_on_with_local_cache(self):
        with self.assertLogs("apps.incidents.polling", level="WARNING") as logs:
            self.assertTrue(warn_if_run_guard_is_process_local())
        self.assertIn("REDIS_URL", logs.output[0])

    @override_settings(POLLING_ENABLED=False, CACHES=LOCMEM)
    def test_silent_when_polling_off(self):
        self.assertFalse(warn_if_run_guard_is_process_local())

    @override_settings(POLLING_ENABLED=True, CACHES=REDIS)
    def test_silent_with_shared_cache(self):
        self.assertFalse(RunGuard.is_process_local())
        self.assertFalse(warn_if_run_guard_is_process_local())


class FallbackControllerTests(TestCase):
    def setUp(self):
        self.controller = FallbackController()

    @override_settings(POLLING_ENABLED=False)
    def test_default_from_settings(self):
        self.assertFalse(self.controller.is_enabled("openai"))

    @override_settings(POLLING_ENABLED=True)
    def test_default_enabled_from_settings(self):
        self.assertTrue(self.controller.is_enabled("openai"))

    def test_registration_failure_enables_polling(self):
        self.controller.on_webhook_registration_failed("OpenAI", "timeout")

        row = PollingFallback.objects.get(provider="openai")
        self.assertTrue(row.enabled)
        self.assertIn("timeout", row.reason)
        self.assertTrue(self.controller.is_enabled("openai"))

    def test_registration_success_disables_polling(self):
        self.controller.enable("openai")
        self.controller.on_webhook_registration_succeeded("openai")

        self.assertFalse(self.controller.is_enabled("openai"))
        self.assertEqual(self.controller.states(), {"openai": False})


class PollingOrchestratorTests(TestCase):
    def setUp(self):
        cache.clear()
        self.provider = MagicMock()
        self.provider.name = "openai"
        self.registry = ProviderRegistry()
        self.registry.register("openai", self.provider)
        self.controller = FallbackController()
        self.controller.enable("openai")
        self.processor = StatusUpdateProcessor(notifier=MagicMock())
        self.orchestrator = PollingOrchestrator(
            registry=self.registry, processor=self.processor, controller=self.controller
        )

    def test_disabled_provider_is_skipped(self):
        self.controller.disable("openai")

        result = self.orchestrator.run("openai")

        self.assertEqual(result.status, "skipped")
        self.provider.list_incidents.assert_not_called()

    def test_cycle_counts_classifications(self):
        self.provider.list_incidents.return_value = [_event("a"), _event("b")]
        first = self.orchestrator.run("openai")

        self.provider.list_incidents.return_value = [_event("a"), _event("b", status="resolved")]
        second = self.orchestrator.run("openai")

        self.assertEqual((first.fetched, first.new, first.changed), (2, 2, 0))
        self.assertEqual((second.new, second.changed, second.duplicates), (0, 1, 1))
        self.assertEqual(IncidentLog.objects.count(), 2)
        self.assertIsNotNone(second.finished_at)

    def test_overlapping_run_is_skipped(self):
        guard = RunGuard("openai")
        guard.acquire()
        try:
            result = self.orchestrator.run("openai")
        finally:
            guard.release()

        self.assertEqual(result.status, "skipped")
        self.assertIn("in progress", result.reason)

    def test_provider_unavailable_yields_empty_batch(self):
        self.provider.list_incidents.side_effect = ProviderUnavailableError("openai", "HTTP 503")

        result = self.orchestrator.run("openai")

        self.assertEqual(result.status, "error")
        self.assertEqual(result.fetched, 0)
        self.assertIsNone(cache.get("status-tracker:polling-run:openai"))

    def test_unknown_provider(self):
        self.controller.enable("ghost")

        result = self.orchestrator.run("ghost")

        self.assertEqual(result.status, "error")
        self.assertIn("Unknown provider", result.errors[0])

    def test_one_failing_event_does_not_stop_batch(self):
        processor = MagicMock()
        processor.process.side_effect = [RuntimeError("boom"), MagicMock(classification=None)]
        self.provider.list_incidents.return_value = [_event("a"), _event("b")]
        orchestrator = PollingOrchestrator(
            registry=self.registry, processor=processor, controller=self.controller
        )

        result = orchestrator.run("openai")

        self.assertEqual(processor.process.call_count, 2)
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.duplicates, 1)

    def test_run_all_polls_every_registered_provider(self):
        self.provider.list_incidents.return_value = []

        results = self.orchestrator.run_all()

        self.assertEqual([result.provider for result in results], ["openai"])
        self.assertEqual(results[0].to_dict()["status"], "completed")

    def test_events_without_id_are_ignored(self):
        self.provider.list_incidents.return_value = [
            _event("", status="investigating"),
            _event("", status="identified"),
            _event("a"),
        ]

        with self.assertLogs("apps.incidents.polling", level="WARNING"):
            result = self.orchestrator.run("openai")

        self.assertEqual((result.fetched, result.new, result.changed, result.ignored), (3, 1, 0, 2))
        self.assertEqual(list(IncidentLog.objects.values_list("incident_id", flat=True)), ["a"])
        self.assertEqual(StatusChangeLog.objects.count(), 0)


def _incidents_response(*incidents):
    response = MagicMock()
    response.read.return_value = json.dumps({"incidents": list(incidents)}).encode("utf-8")
    response.__enter__ = MagicMock(return_value=response)
    response.__exit__ = MagicMock(return_value=False)
    return response


def _incident(status, body, incident_id="inc_1"):
    return {
        "id": incident_id,
        "name": "ChatGPT",
        "status": status,
        "impact": "major",
        "incident_updates": [{"body": body}],
    }


class WebhookAndPollingReconciliationTests(TestCase):
    """Webhook deliveries and polled batches share one record per incident."""

    def setUp(self):
        cache.clear()
        self.notifier = MagicMock()
        self.processor = StatusUpdateProcessor(notifier=self.notifier)
        self.registry = ProviderRegistry()
        self.registry.register(
            "openai",
            GenericStatuspageProvider(name="openai", base_url="https://status.example.com/v1", page_id="p1"),
        )
        self.controller = FallbackController()
        self.controller.enable("openai")
        self.orchestrator = PollingOrchestrator(
            registry=self.registry, processor=self.processor, controller=self.controller
        )
        self.ingestor = WebhookIngestor(processor=self.processor)

    def _webhook(self, incident):
        return self.ingestor.ingest(json.dumps({"incident": incident}), provider="openai")

    def _poll(self, *incidents):
        with patch(
            "apps.providers.base.urllib.request.urlopen", return_value=_incidents_response(*incidents)
        ):
            return self.orchestrator.run("openai")

    def _kinds(self):
        return [call.args[1] for call in self.notifier.dispatch.call_args_list]

    def test_webhook_then_poll(self):
        first = self._webhook(_incident("investigating", "Looking into it"))
        result = self._poll(_incident("identified", "Root cause found"))

        self.assertEqual(first.classification, "new")
        self.assertEqual((result.new, result.changed), (0, 1))
        self.assertEqual(IncidentLog.objects.count(), 1)
        self.assertEqual(IncidentLog.objects.get().status, "identified")
        self.assertEqual(StatusChangeLog.objects.count(), 1)
        self.assertEqual(self._kinds(), ["new", "changed"])

    def test_poll_then_webhook(self):
        result = self._poll(_incident("investigating", "Looking into it"))
        second = self._webhook(_incident("identified", "Root cause found"))

        self.assertEqual(result.new, 1)
        self.assertEqual(second.classification, "changed")
        self.assertEqual(IncidentLog.objects.count(), 1)
        self.assertEqual(IncidentLog.objects.get().status, "identified")
        self.assertEqual(self._kinds(), ["new", "changed"])

    def test_same_state_from_both_sources_is_duplicate(self):
        self._webhook(_incident("investigating", "Looking into it"))
        result = self._poll(_incident("investigating", "Looking into it"))

        self.assertEqual(result.duplicates, 1)
        self.assertEqual(IncidentLog.objects.count(), 1)
        self.assertEqual(self._kinds(), ["new"])

    def test_first_sighting_already_resolved_through_polling(self):
        result = self._poll(_incident("resolved", "Fixed", incident_id="inc_poll"))

        self.assertEqual(result.new, 1)
        record = IncidentLog.objects.get(incident_id="inc_poll")
        self.assertEqual(record.status, "resolved")
        self.assertIsNotNone(record.resolved_at)
        self.assertEqual(StatusChangeLog.objects.count(), 0)
        self.assertEqual(self._kinds(), ["new"])

    def test_polled_incidents_without_id_create_nothing(self):
        with self.assertLogs("apps.providers.statuspage", level="WARNING"):
            self._poll(
                {"name": "A", "status": "investigating"},
                {"name": "B", "status": "identified"},
            )

        self.assertFalse(IncidentLog.objects.exists())
        self.notifier.dispatch.assert_not_called()
