"""Celery tasks for scheduled status work.

Scheduled by CELERY_BEAT_SCHEDULE (config/settings.py):
- poll_providers: polling fallback cycle for every registered provider
- refresh_components: component registry refresh
- check_provider_health: provider connectivity check
- cleanup_stale_components: daily removal of stale operational components

Every task returns a JSON-serializable summary.
"""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def poll_providers() -> list[dict[str, Any]]:
    """Run one polling cycle for every registered provider."""
    from apps.incidents.polling import PollingOrchestrator

    results = PollingOrchestrator().run_all()
    return [result.to_dict() for result in results]


@shared_task
def poll_provider(provider_name: str) -> dict[str, Any]:
    """Run one polling cycle for a single provider."""
    from apps.incidents.polling import PollingOrchestrator

    return PollingOrchestrator().run(provider_name).to_dict()


@shared_task
def sync_providers() -> dict[str, dict[str, Any]]:
    """Full sync (components and incidents) of every registered provider."""
    from apps.providers.registry import get_registry

    results = get_registry().sync_all()
    return {name: result.to_dict() for name, result in results.items()}


@shared_task
def refresh_components() -> dict[str, Any]:
    """Refresh the component registry from every registered provider."""
    from apps.incidents.exceptions import ProviderUnavailableError
    from apps.incidents.services import ComponentRegistryService
    from apps.providers.registry import get_registry

    service = ComponentRegistryService()
    summary: dict[str, Any] = {}

    for provider in get_registry().providers():
        try:
            snapshots = provider.list_components()
        except ProviderUnavailableError as e:
            logger.warning("Component refresh for %s failed: %s", provider.name, e.reason)
            summary[provider.name] = {"refreshed": 0, "error": e.reason}
            continue

        refreshed = 0
        for snapshot in snapshots:
            try:
                service.record(snapshot)
                refreshed += 1
            except Exception:
                logger.exception("Failed to record component %s", snapshot.component_id)
        summary[provider.name] = {"refreshed": refreshed}

    return summary


@shared_task
def check_provider_health() -> dict[str, bool]:
    """Check connectivity of every registered provider."""
    from apps.providers.registry import get_registry

    health = get_registry().health()
    for name, healthy in health.items():
        if not healthy:
            logger.warning("Provider %s is unreachable", name)
    logger.debug("Provider health: %s", health)
    return health


@shared_task
def cleanup_stale_components(days: int | None = None) -> dict[str, int]:
    """Delete operational components that have not been checked recently."""
    from datetime import timedelta

    from apps.incidents.services import ComponentRegistryService

    older_than = timedelta(days=days) if days is not None else None
    deleted = ComponentRegistryService().delete_stale(older_than=older_than)
    return {"deleted": deleted}
