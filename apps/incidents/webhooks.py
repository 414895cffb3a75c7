"""
Webhook ingestion.

Turns a raw Statuspage webhook body into a CanonicalEvent and hands it to
the StatusUpdateProcessor. Only a body that is not JSON at all is rejected;
unrecognized shapes and processing failures are logged and acknowledged.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from apps.incidents.events import CanonicalEvent, ComponentSnapshot
from apps.incidents.exceptions import MalformedPayloadError, UnrecognizedEventShape
from apps.incidents.parsing import component_to_event, component_to_snapshot, incident_to_event
from apps.incidents.services import ComponentRegistryService, StatusUpdateProcessor

logger = logging.getLogger(__name__)


@dataclass
class WebhookResult:
    """Outcome of one webhook delivery."""

    provider: str
    status: str = "processed"  # "processed", "ignored" or "error"
    event_type: str = ""  # "incident", "component" or ""
    service_id: str = ""
    classification: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status,
            "provider": self.provider,
            "event_type": self.event_type,
            "service_id": self.service_id,
            "classification": self.classification,
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data


def parse_body(body: bytes | str) -> Any:
    """
    Decode a webhook body as JSON.

    Raises:
        MalformedPayloadError: If the body is empty, not UTF-8 or not JSON.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPayloadError("Webhook body is not valid UTF-8") from e
    if not body or not body.strip():
        raise MalformedPayloadError("Webhook body is empty")
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise MalformedPayloadError(f"Invalid JSON payload: {e}") from e


def extract_event(
    payload: Any, provider: str
) -> tuple[CanonicalEvent, ComponentSnapshot | None]:
    """
    Classify a parsed payload and map it into a CanonicalEvent.

    Returns the event plus, for component events, the component snapshot.

    Raises:
        UnrecognizedEventShape: If the payload is neither an incident nor a
            component event.
    """
    if not isinstance(payload, dict):
        raise UnrecognizedEventShape(f"Expected a JSON object, got {type(payload).__name__}")

    incident = payload.get("incident")
    if isinstance(incident, dict):
        if not incident.get("id"):
            raise UnrecognizedEventShape("Incident event without an id")
        return incident_to_event(incident, provider), None

    component = payload.get("component")
    if isinstance(component, dict):
        if not component.get("id"):
            raise UnrecognizedEventShape("Component event without an id")
        return component_to_event(component, provider), component_to_snapshot(component, provider)

    raise UnrecognizedEventShape(
        f"Payload has neither 'incident' nor 'component' (keys: {sorted(payload)[:10]})"
    )


class WebhookIngestor:
    """
    Ingests webhook deliveries for any provider.

    Usage:
        ingestor = WebhookIngestor()
        result = ingestor.ingest(request.body, provider="openai")
    """

    def __init__(
        self,
        processor: StatusUpdateProcessor | None = None,
        components: ComponentRegistryService | None = None,
    ):
        self.processor = processor or StatusUpdateProcessor()
        self.components = components or ComponentRegistryService()

    def ingest(self, body: bytes | str, provider: str) -> WebhookResult:
        """
        Process one webhook body.

        Raises:
            MalformedPayloadError: If the body cannot be parsed at all.
        """
        provider = (provider or "").strip().lower()
        result = WebhookResult(provider=provider)

        payload = parse_body(body)

        try:
            event, snapshot = extract_event(payload, provider)
        except UnrecognizedEventShape as e:
            logger.warning("Unrecognized webhook payload from %s: %s", provider, e)
            result.status = "ignored"
            return result

        result.event_type = event.kind
        result.service_id = event.service_id
        logger.info("Received %s webhook from %s for %s", event.kind, provider, event.service_id)

        if snapshot is not None:
            try:
                self.components.record(snapshot)
            except Exception as e:
                logger.exception("Failed to record component %s from webhook", snapshot.component_id)
                result.errors.append(f"component: {e}")

        try:
            outcome = self.processor.process(event)
            result.classification = outcome.classification.value
        except Exception as e:
            logger.exception("Error processing %s webhook from %s", event.kind, provider)
            result.status = "error"
            result.errors.append(str(e))

        return result
