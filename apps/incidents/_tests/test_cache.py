"""Tests for the best-effort status cache."""

from unittest.mock import MagicMock, patch

from django.core.cache import cache
from django.test import SimpleTestCase

from apps.incidents.cache import StatusCache


class _Record:
    provider = "OpenAI"
    incident_id = "inc-1"

    def to_dict(self):
        return {"incident_id": self.incident_id, "status": "investigating"}


class StatusCacheTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.cache = StatusCache()

    def test_set_and_get_incident(self):
        self.assertTrue(self.cache.set_incident(_Record()))
        self.assertEqual(self.cache.get_incident("openai", "inc-1")["status"], "investigating")

    def test_invalidate(self):
        self.cache.set_incident(_Record())
        self.cache.invalidate_incident("openai", "inc-1")
        self.assertIsNone(self.cache.get_incident("openai", "inc-1"))

    def test_backend_errors_are_misses(self):
        broken = MagicMock()
        broken.get.side_effect = ConnectionError("down")
        broken.set.side_effect = ConnectionError("down")
        broken.delete.side_effect = ConnectionError("down")

        with patch("apps.incidents.cache.caches", {"default": broken}):
            self.assertIsNone(self.cache.get_incident("openai", "inc-1"))
            self.assertFalse(self.cache.set_incident(_Record()))
            self.cache.invalidate_incident("openai", "inc-1")
