"""
Polling fallback.

When a provider's webhooks are not authoritative (registration failed, or
polling was switched on by an operator), the orchestrator pulls current
incidents over REST and feeds them through the same StatusUpdateProcessor the
webhooks use. It never decides new-vs-duplicate on its own and never raises.

Public API:
- RunGuard
- warn_if_run_guard_is_process_local
- FallbackController
- PollingOrchestrator
- PollingResult
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from apps.incidents.detection import Classification
from apps.incidents.exceptions import ProviderNotFoundError, ProviderUnavailableError
from apps.incidents.models import PollingFallback
from apps.incidents.services import StatusUpdateProcessor

logger = logging.getLogger(__name__)


@dataclass
class PollingResult:
    """Result of one polling cycle for one provider."""

    provider: str
    status: str = "completed"  # "completed", "skipped" or "error"
    reason: str = ""
    fetched: int = 0
    new: int = 0
    changed: int = 0
    duplicates: int = 0
    ignored: int = 0
    errors: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "status": self.status,
            "reason": self.reason,
            "fetched": self.fetched,
            "new": self.new,
            "changed": self.changed,
            "duplicates": self.duplicates,
            "ignored": self.ignored,
            "errors": list(self.errors),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


class RunGuard:
    """
    Run-in-progress marker shared by every worker through the cache.

    ``cache.add`` only succeeds when the key is absent, so exactly one caller
    acquires it. The TTL frees the key if a holder dies without releasing.
    """

    def __init__(self, name: str, ttl: int | None = None, alias: str = "default"):
        self.key = f"status-tracker:polling-run:{name}"
        if ttl is None:
            ttl = getattr(settings, "POLLING_LOCK_TTL_SECONDS", 600)
        self.ttl = ttl
        self.alias = alias
        self.token = uuid.uuid4().hex
        self.acquired = False

    def acquire(self) -> bool:
        try:
            self.acquired = bool(caches[self.alias].add(self.key, self.token, timeout=self.ttl))
        except Exception as e:
            logger.error("Run guard unavailable for %s, not running: %s", self.key, e)
            self.acquired = False
        return self.acquired

    def release(self) -> None:
        if not self.acquired:
            return
        try:
            cache = caches[self.alias]
            if cache.get(self.key) == self.token:
                cache.delete(self.key)
        except Exception as e:
            logger.warning("Could not release run guard %s: %s", self.key, e)
        finally:
            self.acquired = False

    def __enter__(self) -> bool:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @classmethod
    def is_process_local(cls, alias: str = "default") -> bool:
        """True when the guard's cache is not shared between worker processes."""
        backend = settings.CACHES.get(alias, {}).get("BACKEND", "")
        return backend.endswith((".LocMemCache", ".DummyCache"))


def warn_if_run_guard_is_process_local() -> bool:
    """Log a warning when polling is on but workers cannot share the run guard."""
    if not getattr(settings, "POLLING_ENABLED", False) or not RunGuard.is_process_local():
        return False
    logger.warning(
        "POLLING_ENABLED is set but the default cache is process-local; "
        "separate worker processes will not share the polling run guard. Set REDIS_URL."
    )
    return True


class FallbackController:
    """
    Control surface for the polling fallback.

    The orchestrator only reads ``is_enabled``; whoever manages webhook
    registration calls the ``on_webhook_registration_*`` hooks.
    """

    def is_enabled(self, provider: str) -> bool:
        row = PollingFallback.objects.filter(provider=provider.lower()).first()
        if row is None:
            return bool(getattr(settings, "POLLING_ENABLED", False))
        return row.enabled

    def enable(self, provider: str, reason: str = "") -> PollingFallback:
        return self._set(provider, True, reason or "enabled manually")

    def disable(self, provider: str, reason: str = "") -> PollingFallback:
        return self._set(provider, False, reason or "disabled manually")

    def on_webhook_registration_failed(self, provider: str, error: Any = None) -> PollingFallback:
        logger.warning("Webhook registration failed for %s, enabling polling: %s", provider, error)
        reason = "webhook registration failed"
        if error:
            reason = f"{reason}: {error}"
        return self.enable(provider, reason)

    def on_webhook_registration_succeeded(self, provider: str) -> PollingFallback:
        logger.info("Webhook registration succeeded for %s, disabling polling", provider)
        return self.disable(provider, "webhook registration succeeded")

    def states(self) -> dict[str, bool]:
        return dict(PollingFallback.objects.values_list("provider", "enabled"))

    def _set(self, provider: str, enabled: bool, reason: str) -> PollingFallback:
        row, _ = PollingFallback.objects.update_or_create(
            provider=provider.lower(),
            defaults={"enabled": enabled, "reason": reason[:500]},
        )
        logger.info(
            "Polling fallback for %s %s (%s)",
            row.provider,
            "enabled" if enabled else "disabled",
            reason,
        )
        return row


class PollingOrchestrator:
    """
    Runs polling cycles.

    Usage:
        orchestrator = PollingOrchestrator()
        result = orchestrator.run("openai")
    """

    def __init__(
        self,
        registry=None,
        processor: StatusUpdateProcessor | None = None,
        controller: FallbackController | None = None,
        lock_ttl: int | None = None,
    ):
        if registry is None:
            from apps.providers.registry import get_registry

            registry = get_registry()
        self.registry = registry
        self._processor = processor
        self.controller = controller or FallbackController()
        self.lock_ttl = lock_ttl

    @property
    def processor(self) -> StatusUpdateProcessor:
        if self._processor is None:
            self._processor = StatusUpdateProcessor()
        return self._processor

    def run(self, provider_name: str) -> PollingResult:
        """Run one cycle for ``provider_name``. Never raises."""
        name = (provider_name or "").strip().lower()
        result = PollingResult(provider=name, started_at=timezone.now())

        try:
            if not self.controller.is_enabled(name):
                result.status = "skipped"
                result.reason = "polling disabled"
                logger.debug("Polling disabled for %s, skipping", name)
                return result

            with RunGuard(name, ttl=self.lock_ttl) as acquired:
                if not acquired:
                    result.status = "skipped"
                    result.reason = "previous run still in progress"
                    logger.info("Polling for %s already running, skipping", name)
                    return result
                self._poll(name, result)
        except Exception as e:
            logger.exception("Polling cycle for %s failed", name)
            result.status = "error"
            result.errors.append(str(e))
        finally:
            result.finished_at = timezone.now()

        return result

    def run_all(self) -> list[PollingResult]:
        return [self.run(name) for name in self.registry.names()]

    def _poll(self, name: str, result: PollingResult) -> None:
        try:
            provider = self.registry.get(name)
            events = provider.list_incidents()
        except ProviderNotFoundError as e:
            logger.error("Cannot poll %s: %s", name, e)
            result.status = "error"
            result.errors.append(str(e))
            return
        except ProviderUnavailableError as e:
            logger.warning("Polling %s failed, empty batch this cycle: %s", name, e.reason)
            result.status = "error"
            result.errors.append(str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error polling %s, empty batch this cycle", name)
            result.status = "error"
            result.errors.append(str(e))
            return

        result.fetched = len(events)
        for event in events:
            if not event.service_id:
                logger.warning("Ignoring polled incident from %s without an id", name)
                result.ignored += 1
                continue
            try:
                outcome = self.processor.process(event)
            except Exception as e:
                logger.exception("Failed to process polled incident %s from %s", event.service_id, name)
                result.errors.append(f"{event.service_id}: {e}")
                continue

            if outcome.classification is Classification.NEW:
                result.new += 1
            elif outcome.classification is Classification.CHANGED:
                result.changed += 1
            else:
                result.duplicates += 1

        logger.info(
            "Polling sync completed for %s: %d incidents (%d new, %d changed, %d duplicate)",
            name,
            result.fetched,
            result.new,
            result.changed,
            result.duplicates,
        )
