"""Generic Statuspage.io provider.

Works with any Statuspage-compatible backend given a base URL and page id:

- GET {base_url}/pages/{page_id}/incidents.json
- GET {base_url}/pages/{page_id}/components.json
- GET {base_url}/pages/{page_id}/status.json (health)
"""

import logging
from typing import Any

from apps.incidents.events import CanonicalEvent, ComponentSnapshot
from apps.incidents.exceptions import ProviderUnavailableError
from apps.incidents.parsing import component_to_snapshot, incident_to_event
from apps.providers.base import BaseStatusProvider

logger = logging.getLogger(__name__)


def _items(data: Any, key: str) -> list[dict[str, Any]]:
    """Accept both ``{"<key>": [...]}`` and a bare list."""
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


def _identified(items: list[dict[str, Any]], kind: str, provider: str) -> list[dict[str, Any]]:
    """Drop items without an ``id``; they cannot be keyed to a record."""
    kept = []
    for item in items:
        if not item.get("id"):
            logger.warning("Ignoring %s from %s without an id: %s", kind, provider, item.get("name", ""))
            continue
        kept.append(item)
    return kept


class GenericStatuspageProvider(BaseStatusProvider):
    """Provider for any Statuspage.io based status page."""

    def __init__(
        self,
        name: str,
        base_url: str,
        page_id: str,
        webhook_path: str = "",
        webhook_secret: str = "",
        timeout: int | None = None,
    ):
        self.name = (name or "").strip().lower()
        super().__init__(
            base_url=base_url,
            page_id=page_id,
            webhook_path=webhook_path,
            webhook_secret=webhook_secret,
            timeout=timeout,
        )

    def page_url(self, resource: str) -> str:
        return f"{self.base_url}/pages/{self.page_id}/{resource}"

    def _require_page(self) -> None:
        if not self.base_url or not self.page_id:
            raise ProviderUnavailableError(self.name, "base_url and page_id must be configured")

    def list_incidents(self) -> list[CanonicalEvent]:
        self._require_page()
        data = self._fetch_json(self.page_url("incidents.json"))
        items = _identified(_items(data, "incidents"), "incident", self.name)
        events = [incident_to_event(item, self.name) for item in items]
        logger.debug("Retrieved %d incidents from %s", len(events), self.name)
        return events

    def list_components(self) -> list[ComponentSnapshot]:
        self._require_page()
        data = self._fetch_json(self.page_url("components.json"))
        items = _identified(_items(data, "components"), "component", self.name)
        snapshots = [component_to_snapshot(item, self.name) for item in items]
        logger.debug("Retrieved %d components from %s", len(snapshots), self.name)
        return snapshots

    def is_healthy(self) -> bool:
        try:
            self._require_page()
            body = self._fetch(self.page_url("status.json"))
        except ProviderUnavailableError as e:
            logger.warning("%s provider health check failed: %s", self.name, e.reason)
            return False
        return bool(body and body.strip())
