"""Best-effort cache in front of the incident and component tables.

The database is always the source of truth. Every cache call swallows backend
errors (Redis down, serialization problems) and reports a miss, so callers
fall back to the store.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)

INCIDENT_PREFIX = "incident"
COMPONENT_PREFIX = "component"


def _key(prefix: str, provider: str, object_id: str) -> str:
    return f"status-tracker:{prefix}:{(provider or '').lower()}:{object_id}"


class StatusCache:
    """Read-through/write-through helper around a Django cache alias."""

    def __init__(self, alias: str = "default", ttl: int | None = None):
        self.alias = alias
        if ttl is None:
            ttl = getattr(settings, "INCIDENT_CACHE_TTL_SECONDS", 3600)
        self.ttl = ttl

    @property
    def backend(self):
        return caches[self.alias]

    def _get(self, key: str) -> Any:
        try:
            return self.backend.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %s, using database: %s", key, e)
            return None

    def _set(self, key: str, value: Any) -> bool:
        try:
            self.backend.set(key, value, timeout=self.ttl)
            return True
        except Exception as e:
            logger.warning("Cache write failed for %s, continuing without cache: %s", key, e)
            return False

    def _delete(self, key: str) -> None:
        try:
            self.backend.delete(key)
        except Exception as e:
            logger.warning("Cache delete failed for %s: %s", key, e)

    def get_incident(self, provider: str, incident_id: str) -> dict[str, Any] | None:
        return self._get(_key(INCIDENT_PREFIX, provider, incident_id))

    def set_incident(self, record) -> bool:
        return self._set(_key(INCIDENT_PREFIX, record.provider, record.incident_id), record.to_dict())

    def invalidate_incident(self, provider: str, incident_id: str) -> None:
        self._delete(_key(INCIDENT_PREFIX, provider, incident_id))

    def get_component(self, provider: str, component_id: str) -> dict[str, Any] | None:
        return self._get(_key(COMPONENT_PREFIX, provider, component_id))

    def set_component(self, component) -> bool:
        return self._set(
            _key(COMPONENT_PREFIX, component.provider, component.component_id),
            component.to_dict(),
        )
