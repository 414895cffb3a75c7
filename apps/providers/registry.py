"""
Process-wide registry of status providers.

Request handlers and Celery tasks read the registry concurrently while
registration is rare, so writes swap in a fresh dict under a short lock and
reads work on whatever dict is current without locking.
"""

from __future__ import annotations

import logging
import threading

from apps.incidents.exceptions import InvalidProviderError, ProviderNotFoundError
from apps.providers.base import BaseStatusProvider, SyncResult

logger = logging.getLogger(__name__)


def _normalize(name: str | None) -> str:
    return (name or "").strip().lower()


class ProviderRegistry:
    """Maps provider names (lower-cased) to provider instances."""

    def __init__(self):
        self._lock = threading.Lock()
        self._providers: dict[str, BaseStatusProvider] = {}

    def register(self, name: str, provider: BaseStatusProvider | None) -> None:
        """
        Register (or replace) a provider.

        Raises:
            InvalidProviderError: If the name is empty or provider is None.
        """
        key = _normalize(name)
        if not key or provider is None:
            raise InvalidProviderError("Provider name and implementation cannot be empty")

        with self._lock:
            providers = dict(self._providers)
            providers[key] = provider
            self._providers = providers
        logger.info("Provider registered: %s", key)

    def unregister(self, name: str) -> bool:
        """Remove a provider. Returns False if it was not registered."""
        key = _normalize(name)
        with self._lock:
            if key not in self._providers:
                return False
            providers = dict(self._providers)
            del providers[key]
            self._providers = providers
        logger.info("Provider unregistered: %s", key)
        return True

    def clear(self) -> None:
        with self._lock:
            self._providers = {}

    def get(self, name: str) -> BaseStatusProvider:
        """
        Get a provider by name.

        Raises:
            ProviderNotFoundError: If no provider is registered under ``name``.
        """
        provider = self._providers.get(_normalize(name))
        if provider is None:
            raise ProviderNotFoundError(
                f"Unknown provider: {name}. Available: {', '.join(self.names()) or 'none'}"
            )
        return provider

    def has(self, name: str) -> bool:
        return _normalize(name) in self._providers

    def names(self) -> list[str]:
        return sorted(self._providers)

    def providers(self) -> list[BaseStatusProvider]:
        snapshot = self._providers
        return [snapshot[key] for key in sorted(snapshot)]

    def count(self) -> int:
        return len(self._providers)

    def is_healthy(self, name: str) -> bool:
        """Health of one provider. Unknown providers and failing checks are unhealthy."""
        try:
            return bool(self.get(name).is_healthy())
        except Exception as e:
            logger.error("Provider health check failed for %s: %s", name, e)
            return False

    def health(self) -> dict[str, bool]:
        return {name: self.is_healthy(name) for name in self.names()}

    def sync_all(self) -> dict[str, SyncResult]:
        """Sync every registered provider; one failure does not stop the others."""
        snapshot = self._providers
        logger.info("Syncing status from all %d providers", len(snapshot))
        results: dict[str, SyncResult] = {}
        for name in sorted(snapshot):
            try:
                results[name] = snapshot[name].sync()
            except Exception as e:
                logger.exception("Error syncing status from %s", name)
                results[name] = SyncResult(provider=name, errors=[str(e)])
        return results


_registry = ProviderRegistry()


def get_registry() -> ProviderRegistry:
    """Return the process-wide provider registry."""
    return _registry
