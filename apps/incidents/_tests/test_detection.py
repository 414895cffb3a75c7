"""Tests for ChangeDetector classification rules."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

from django.test import SimpleTestCase

from apps.incidents.detection import ChangeDetector, Classification, compute_fingerprint
from apps.incidents.events import CanonicalEvent

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


@dataclass
class _Stored:
    status: str
    status_message: str
    updated_at: datetime


def _event(status="investigating", message="Looking into it"):
    return CanonicalEvent(provider="openai", service_id="inc-1", status=status, message=message)


class ChangeDetectorTests(SimpleTestCase):
    def setUp(self):
        self.detector = ChangeDetector()

    def test_no_existing_record_is_new(self):
        self.assertEqual(self.detector.classify(_event(), None, NOW), Classification.NEW)

    def test_status_change_is_changed(self):
        stored = _Stored("investigating", "Looking into it", NOW)
        decision = self.detector.decide(_event(status="identified"), stored, NOW)

        self.assertEqual(decision.classification, Classification.CHANGED)
        self.assertIn("investigating -> identified", decision.reason)

    def test_status_compare_ignores_case(self):
        stored = _Stored("INVESTIGATING", "Looking into it", NOW)
        self.assertEqual(self.detector.classify(_event(), stored, NOW), Classification.DUPLICATE)

    def test_identical_update_is_duplicate(self):
        stored = _Stored("investigating", "Looking into it", NOW - timedelta(hours=5))
        decision = self.detector.decide(_event(), stored, NOW)

        self.assertEqual(decision.classification, Classification.DUPLICATE)
        self.assertFalse(decision.is_new_information)

    def test_message_compare_ignores_case(self):
        stored = _Stored("investigating", "LOOKING INTO IT", NOW - timedelta(hours=5))
        self.assertEqual(self.detector.classify(_event(), stored, NOW), Classification.DUPLICATE)

    def test_message_change_inside_window_is_suppressed(self):
        stored = _Stored("investigating", "old text", NOW - timedelta(seconds=59))
        self.assertEqual(self.detector.classify(_event(), stored, NOW), Classification.DUPLICATE)

    def test_message_change_after_window_is_changed(self):
        stored = _Stored("investigating", "old text", NOW - timedelta(seconds=61))
        decision = self.detector.decide(_event(), stored, NOW)

        self.assertEqual(decision.classification, Classification.CHANGED)
        self.assertTrue(decision.is_new_information)

    def test_message_change_exactly_at_window_is_suppressed(self):
        stored = _Stored("investigating", "old text", NOW - timedelta(seconds=60))
        self.assertEqual(self.detector.classify(_event(), stored, NOW), Classification.DUPLICATE)

    def test_custom_window(self):
        detector = ChangeDetector(message_window=timedelta(seconds=5))
        stored = _Stored("investigating", "old text", NOW - timedelta(seconds=10))
        self.assertEqual(detector.classify(_event(), stored, NOW), Classification.CHANGED)

    def test_negative_window_rejected(self):
        with self.assertRaises(ValueError):
            ChangeDetector(message_window=timedelta(seconds=-1))


class FingerprintTests(SimpleTestCase):
    def test_fingerprint_is_stable_sha256(self):
        first = compute_fingerprint(_event())
        second = compute_fingerprint(_event())

        self.assertEqual(first, second)
        self.assertEqual(len(first), 64)

    def test_fingerprint_depends_on_status_and_message(self):
        base = compute_fingerprint(_event())
        self.assertNotEqual(base, compute_fingerprint(_event(status="identified")))
        self.assertNotEqual(base, compute_fingerprint(_event(message="other")))
