"""
Incident lifecycle services.

This module owns every write to the incident tables:

- IncidentLifecycleManager applies classified events (Absent -> Open ->
  Resolved, with reopening) and appends the audit trail.
- StatusUpdateProcessor is the single entry point used by webhooks and
  polling: lifecycle apply, console line, notification dispatch.
- IncidentQueryService provides the read side.
- ComponentRegistryService keeps component health with optimistic locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F
from django.utils import timezone

from apps.incidents.cache import StatusCache
from apps.incidents.detection import ChangeDetector, Classification, compute_fingerprint
from apps.incidents.events import CanonicalEvent, ComponentSnapshot
from apps.incidents.exceptions import PersistenceConflictError
from apps.incidents.models import Component, IncidentLog, StatusChangeLog

logger = logging.getLogger(__name__)

NOTIFY_NEW = "new"
NOTIFY_CHANGED = "changed"
NOTIFY_RESOLVED = "resolved"


def _detector_from_settings() -> ChangeDetector:
    seconds = getattr(settings, "CHANGE_DETECTION_WINDOW_SECONDS", 60)
    return ChangeDetector(message_window=timedelta(seconds=seconds))


@dataclass
class LifecycleOutcome:
    """Result of applying one event to the incident history."""

    classification: Classification
    record: IncidentLog | None
    previous_status: str | None = None
    notify_kind: str | None = None
    reason: str = ""
    attempts: int = 1

    @property
    def is_new_information(self) -> bool:
        return self.classification is not Classification.DUPLICATE


class IncidentLifecycleManager:
    """
    Applies NEW / CHANGED / DUPLICATE decisions to IncidentLog rows.

    Same-key writers are serialized by ``select_for_update`` where the engine
    supports row locks, and by the unique constraint everywhere: a lost
    create race surfaces as IntegrityError, the attempt's savepoint is rolled
    back and the event is re-read and re-applied as an update.

    Usage:
        manager = IncidentLifecycleManager()
        outcome = manager.apply(event)
    """

    def __init__(
        self,
        detector: ChangeDetector | None = None,
        max_retries: int | None = None,
        cache: StatusCache | None = None,
    ):
        self.detector = detector or _detector_from_settings()
        if max_retries is None:
            max_retries = getattr(settings, "LIFECYCLE_MAX_RETRIES", 3)
        self.max_retries = max(1, int(max_retries))
        self.cache = cache or StatusCache()

    def apply(self, event: CanonicalEvent, now: datetime | None = None) -> LifecycleOutcome:
        """
        Classify ``event`` against the stored record and apply the transition.

        Raises:
            PersistenceConflictError: If the create race is still lost after
                ``max_retries`` attempts.
        """
        now = now or timezone.now()

        for attempt in range(1, self.max_retries + 1):
            try:
                with transaction.atomic():
                    outcome = self._apply_once(event, now)
            except IntegrityError as e:
                logger.info(
                    "Lost create race for %s/%s (attempt %d/%d): %s",
                    event.provider,
                    event.service_id,
                    attempt,
                    self.max_retries,
                    e,
                )
                continue

            outcome.attempts = attempt
            if outcome.record is not None and outcome.is_new_information:
                record = outcome.record
                transaction.on_commit(lambda: self.cache.set_incident(record))
            return outcome

        raise PersistenceConflictError(
            f"Could not apply event for {event.provider}/{event.service_id} "
            f"after {self.max_retries} attempts"
        )

    def _load_existing(self, event: CanonicalEvent) -> IncidentLog | None:
        return (
            IncidentLog.objects.select_for_update()
            .filter(incident_id=event.service_id, provider=event.provider)
            .first()
        )

    def _apply_once(self, event: CanonicalEvent, now: datetime) -> LifecycleOutcome:
        existing = self._load_existing(event)
        decision = self.detector.decide(event, existing, now)

        if decision.classification is Classification.NEW:
            record = self._create(event, now)
            return LifecycleOutcome(
                classification=decision.classification,
                record=record,
                notify_kind=NOTIFY_NEW,
                reason=decision.reason,
            )

        if decision.classification is Classification.CHANGED:
            previous_status = existing.status
            self._update(existing, event, now)
            StatusChangeLog.objects.create(
                service_id=event.service_id,
                service_name=existing.service_name,
                previous_status=previous_status,
                current_status=existing.status,
                provider=event.provider,
                changed_at=now,
            )
            logger.info(
                "Incident updated: %s (%s -> %s)",
                existing.service_name,
                previous_status,
                existing.status,
            )
            return LifecycleOutcome(
                classification=decision.classification,
                record=existing,
                previous_status=previous_status,
                notify_kind=NOTIFY_RESOLVED if event.is_resolved else NOTIFY_CHANGED,
                reason=decision.reason,
            )

        logger.debug(
            "Duplicate status update ignored for %s/%s: %s",
            event.provider,
            event.service_id,
            decision.reason,
        )
        return LifecycleOutcome(
            classification=decision.classification,
            record=existing,
            previous_status=existing.status if existing else None,
            reason=decision.reason,
        )

    def _create(self, event: CanonicalEvent, now: datetime) -> IncidentLog:
        # A savepoint of its own keeps the outer transaction usable after a
        # unique-constraint violation.
        with transaction.atomic():
            record = IncidentLog.objects.create(
                incident_id=event.service_id,
                provider=event.provider,
                service_name=event.product_name,
                status=event.status,
                status_message=event.message,
                severity=event.severity,
                incident_url=event.url,
                affected_components=list(event.affected_components),
                content_fingerprint=compute_fingerprint(event),
                created_at=now,
                updated_at=now,
                resolved_at=now if event.is_resolved else None,
                observed_at=event.observed_at,
            )
        logger.info("New incident created: %s (%s)", record.service_name, record.status)
        return record

    def _update(self, record: IncidentLog, event: CanonicalEvent, now: datetime) -> None:
        record.status = event.status
        record.status_message = event.message
        record.severity = event.severity
        record.content_fingerprint = compute_fingerprint(event)
        record.updated_at = now
        record.observed_at = event.observed_at
        if event.product_name:
            record.service_name = event.product_name
        if event.url:
            record.incident_url = event.url
        if event.affected_components:
            record.affected_components = list(event.affected_components)

        if event.is_resolved:
            if record.resolved_at is None:
                record.resolved_at = now
        elif record.resolved_at is not None:
            logger.info("Incident reopened: %s", record.service_name)
            record.resolved_at = None

        record.save()


class StatusUpdateProcessor:
    """
    Single entry point for status events from any source.

    Applies the event through the lifecycle manager, writes the console line
    for new information and hands it to the notifier. Notification problems
    are logged, never raised.
    """

    def __init__(
        self,
        lifecycle: IncidentLifecycleManager | None = None,
        notifier: Any | None = None,
    ):
        self.lifecycle = lifecycle or IncidentLifecycleManager()
        if notifier is None:
            from apps.notify.services import NotificationDispatcher

            notifier = NotificationDispatcher()
        self.notifier = notifier

    def process(self, event: CanonicalEvent, now: datetime | None = None) -> LifecycleOutcome:
        logger.info("Processing status update for %s - %s", event.product_name, event.status)
        outcome = self.lifecycle.apply(event, now=now)

        if outcome.notify_kind:
            self._log_console(event)
            try:
                self.notifier.dispatch(event, outcome.notify_kind)
            except Exception:
                logger.exception(
                    "Notification dispatch failed for %s/%s", event.provider, event.service_id
                )

        return outcome

    @staticmethod
    def _log_console(event: CanonicalEvent) -> None:
        timestamp = timezone.localtime().strftime("%Y-%m-%d %H:%M:%S")
        logger.info("[%s] Product: %s - %s", timestamp, event.product_name, event.message)


class IncidentQueryService:
    """Read-only projections over the incident history."""

    def __init__(self, cache: StatusCache | None = None):
        self.cache = cache or StatusCache()

    def active_incidents(self, provider: str | None = None):
        """Unresolved incidents, most recently updated first."""
        queryset = IncidentLog.objects.unresolved()
        if provider:
            queryset = queryset.for_provider(provider)
        return queryset.order_by("-updated_at")

    def recent_incidents(self, provider: str, hours: int = 24, now: datetime | None = None):
        """Incidents for ``provider`` updated within the trailing ``hours``."""
        since = (now or timezone.now()) - timedelta(hours=hours)
        return IncidentLog.objects.for_provider(provider).updated_since(since).order_by("-updated_at")

    def get_incident(self, provider: str, incident_id: str) -> dict[str, Any] | None:
        """Read-through lookup of one incident as a dict."""
        cached = self.cache.get_incident(provider, incident_id)
        if cached is not None:
            return cached

        record = IncidentLog.objects.for_provider(provider).filter(incident_id=incident_id).first()
        if record is None:
            return None
        self.cache.set_incident(record)
        return record.to_dict()

    def status_history(self, service_id: str, provider: str | None = None):
        """Audit rows for one incident in chronological order."""
        queryset = StatusChangeLog.objects.filter(service_id=service_id)
        if provider:
            queryset = queryset.filter(provider=provider.lower())
        return queryset.order_by("changed_at", "id")

    def incident_counts_by_provider(
        self,
        providers: list[str],
        hours: int = 24,
        now: datetime | None = None,
    ) -> dict[str, int]:
        """Number of incidents updated within ``hours`` for each provider name."""
        since = (now or timezone.now()) - timedelta(hours=hours)
        names = [name.lower() for name in providers]
        counts = {name: 0 for name in names}
        rows = (
            IncidentLog.objects.filter(provider__in=names, updated_at__gte=since)
            .values("provider")
            .annotate(total=Count("id"))
        )
        for row in rows:
            counts[row["provider"]] = row["total"]
        return counts


class ComponentRegistryService:
    """
    Keeps the component registry current.

    Updates are compare-and-swap on ``version``: read the row, then
    ``UPDATE ... WHERE version = <read>`` and retry when another writer won.
    """

    def __init__(self, max_retries: int | None = None, cache: StatusCache | None = None):
        if max_retries is None:
            max_retries = getattr(settings, "COMPONENT_CAS_MAX_RETRIES", 5)
        self.max_retries = max(1, int(max_retries))
        self.cache = cache or StatusCache()

    def record(self, snapshot: ComponentSnapshot) -> Component:
        """
        Insert or update a component from a snapshot.

        Raises:
            PersistenceConflictError: If every CAS attempt lost its race.
        """
        checked_at = snapshot.checked_at or timezone.now()

        for attempt in range(1, self.max_retries + 1):
            component, created = Component.objects.get_or_create(
                component_id=snapshot.component_id,
                provider=snapshot.provider,
                defaults={
                    "name": snapshot.name,
                    "current_status": snapshot.status,
                    "description": snapshot.description,
                    "group_id": snapshot.group_id,
                    "position": snapshot.position,
                    "last_checked_at": checked_at,
                },
            )
            if created:
                logger.info("Component registered: %s (%s)", component.name, component.provider)
                self.cache.set_component(component)
                return component

            if self._compare_and_swap(component, snapshot, checked_at):
                component.refresh_from_db()
                self.cache.set_component(component)
                return component

            logger.debug(
                "Component %s/%s changed concurrently (attempt %d)",
                snapshot.provider,
                snapshot.component_id,
                attempt,
            )

        raise PersistenceConflictError(
            f"Component {snapshot.provider}/{snapshot.component_id} "
            f"still contended after {self.max_retries} attempts"
        )

    def _compare_and_swap(
        self, component: Component, snapshot: ComponentSnapshot, checked_at: datetime
    ) -> bool:
        if component.current_status != snapshot.status:
            logger.info(
                "Component %s status: %s -> %s",
                component.name,
                component.current_status,
                snapshot.status,
            )
        updated = Component.objects.filter(pk=component.pk, version=component.version).update(
            name=snapshot.name or component.name,
            current_status=snapshot.status,
            description=snapshot.description,
            group_id=snapshot.group_id,
            position=snapshot.position,
            last_checked_at=checked_at,
            updated_at=timezone.now(),
            version=F("version") + 1,
        )
        return updated == 1

    def degraded_components(self, provider: str | None = None):
        queryset = Component.objects.degraded()
        if provider:
            queryset = queryset.for_provider(provider)
        return queryset.order_by("provider", "position")

    def components_for(self, provider: str):
        return Component.objects.for_provider(provider).order_by("position", "name")

    def delete_stale(self, older_than: timedelta | None = None, now: datetime | None = None) -> int:
        """Delete operational components not checked since the cutoff."""
        if older_than is None:
            older_than = timedelta(days=getattr(settings, "STALE_COMPONENT_DAYS", 60))
        cutoff = (now or timezone.now()) - older_than
        deleted, _ = Component.objects.filter(
            current_status="operational",
            last_checked_at__lt=cutoff,
        ).delete()
        logger.info("Deleted %d stale component records", deleted)
        return deleted
