"""Base provider and data structures for third-party status sources.

A provider knows how to talk to one vendor's status page: list current
incidents and components, report health, validate webhook signatures and run
a full sync.

Public API:
- SyncResult
- BaseStatusProvider
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from django.conf import settings
from django.utils import timezone

from apps.incidents.events import CanonicalEvent, ComponentSnapshot
from apps.incidents.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of a provider sync."""

    provider: str
    incidents_seen: int = 0
    incidents_changed: int = 0
    components_refreshed: int = 0
    errors: list[str] = field(default_factory=list)
    synced_at: datetime | None = None

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "incidents_seen": self.incidents_seen,
            "incidents_changed": self.incidents_changed,
            "components_refreshed": self.components_refreshed,
            "errors": list(self.errors),
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
        }


class BaseStatusProvider(ABC):
    """Abstract base class for status page providers."""

    name: str = "base"

    USER_AGENT = "StatusTracker/1.0"

    def __init__(
        self,
        base_url: str = "",
        page_id: str = "",
        webhook_path: str = "",
        webhook_secret: str = "",
        timeout: int | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self._page_id = page_id or ""
        self.webhook_path = webhook_path or f"/webhook/{self.name}/"
        self.webhook_secret = webhook_secret or ""
        if timeout is None:
            timeout = getattr(settings, "POLLING_HTTP_TIMEOUT_SECONDS", 10)
        self.timeout = timeout
        self._last_sync_at: datetime | None = None

    @property
    def page_id(self) -> str:
        return self._page_id

    @property
    def webhook_url(self) -> str:
        return self.webhook_path

    @property
    def last_sync_at(self) -> datetime | None:
        return self._last_sync_at

    @abstractmethod
    def list_incidents(self) -> list[CanonicalEvent]:
        """Fetch current incidents as canonical events.

        Raises:
            ProviderUnavailableError: If the provider cannot be reached.
        """

    @abstractmethod
    def list_components(self) -> list[ComponentSnapshot]:
        """Fetch current component health.

        Raises:
            ProviderUnavailableError: If the provider cannot be reached.
        """

    @abstractmethod
    def is_healthy(self) -> bool:
        """Return True when the provider's status surface answers."""

    def validate_webhook_signature(self, body: bytes | str, signature: str | None) -> bool:
        """Check an inbound webhook signature.

        Without a configured secret any non-empty signature is accepted. With a
        secret, the signature must be the hex HMAC-SHA256 of the raw body
        (optionally prefixed with ``sha256=``).
        """
        if not signature or not signature.strip():
            return False
        if not self.webhook_secret:
            return True

        if isinstance(body, str):
            body = body.encode("utf-8")
        expected = hmac.new(self.webhook_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        candidate = signature.strip().lower()
        if candidate.startswith("sha256="):
            candidate = candidate[len("sha256=") :]
        return hmac.compare_digest(expected, candidate)

    def sync(self) -> SyncResult:
        """Refresh components and feed current incidents through processing.

        Fetch failures are recorded on the result instead of raised.
        """
        from apps.incidents.services import ComponentRegistryService, StatusUpdateProcessor

        result = SyncResult(provider=self.name)
        logger.info("Syncing %s status...", self.name)

        try:
            snapshots = self.list_components()
        except ProviderUnavailableError as e:
            logger.warning("Component refresh for %s failed: %s", self.name, e.reason)
            result.errors.append(str(e))
        else:
            registry = ComponentRegistryService()
            for snapshot in snapshots:
                try:
                    registry.record(snapshot)
                    result.components_refreshed += 1
                except Exception as e:
                    logger.exception("Failed to record component %s", snapshot.component_id)
                    result.errors.append(f"component {snapshot.component_id}: {e}")

        try:
            events = self.list_incidents()
        except ProviderUnavailableError as e:
            logger.warning("Incident sync for %s failed: %s", self.name, e.reason)
            result.errors.append(str(e))
            return result

        processor = StatusUpdateProcessor()
        for event in events:
            if not event.service_id:
                logger.warning("Ignoring incident from %s without an id", self.name)
                continue
            result.incidents_seen += 1
            try:
                outcome = processor.process(event)
                if outcome.is_new_information:
                    result.incidents_changed += 1
            except Exception as e:
                logger.exception("Failed to process incident %s from %s", event.service_id, self.name)
                result.errors.append(f"incident {event.service_id}: {e}")

        self._last_sync_at = timezone.now()
        result.synced_at = self._last_sync_at
        logger.info(
            "%s status sync completed: %d incidents (%d changed), %d components",
            self.name,
            result.incidents_seen,
            result.incidents_changed,
            result.components_refreshed,
        )
        return result

    def _fetch(self, url: str) -> str:
        """GET ``url`` and return the decoded body.

        Raises:
            ProviderUnavailableError: On any transport or HTTP failure.
        """
        request = urllib.request.Request(
            url,
            headers={"Accept": "application/json", "User-Agent": self.USER_AGENT},
            method="GET",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                return response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            raise ProviderUnavailableError(self.name, f"HTTP {e.code} from {url}") from e
        except urllib.error.URLError as e:
            raise ProviderUnavailableError(self.name, f"cannot reach {url}: {e.reason}") from e
        except (TimeoutError, OSError) as e:
            raise ProviderUnavailableError(self.name, f"error fetching {url}: {e}") from e

    def _fetch_json(self, url: str) -> Any:
        body = self._fetch(url)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ProviderUnavailableError(self.name, f"invalid JSON from {url}") from e

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} page_id={self.page_id!r}>"
