"""
Webhook endpoint for provider status pushes.
"""

import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.incidents.exceptions import MalformedPayloadError
from apps.incidents.views._mixins import JSONResponseMixin
from apps.incidents.webhooks import WebhookIngestor
from apps.providers.registry import get_registry

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class StatusWebhookView(JSONResponseMixin, View):
    """
    Receives Statuspage webhooks.

    POST /webhook/<provider>/
    GET  /webhook/<provider>/   (readiness probe)

    Unparseable bodies (empty, not UTF-8, not JSON) get a 400 client error
    rather than a 5xx server error, and nothing is stored. Anything that
    parses is acknowledged with 200, including shapes we do not understand
    and events whose processing failed.
    """

    def post(self, request, provider):
        try:
            if not self._signature_ok(request, provider):
                logger.warning("Rejected webhook for %s: invalid signature", provider)
                return self.error_response("Invalid webhook signature", status=401)

            try:
                result = WebhookIngestor().ingest(request.body, provider)
            except MalformedPayloadError as e:
                logger.warning("Malformed webhook payload for %s: %s", provider, e)
                return self.error_response(str(e), status=400)

            if result.has_errors:
                logger.warning("Webhook processing errors for %s: %s", provider, result.errors)

            return self.json_response(result.to_dict())

        except Exception as e:
            logger.exception("Unexpected error processing webhook")
            return self.error_response(str(e), status=500)

    def get(self, request, provider):
        """Readiness probe for the webhook sender."""
        return self.json_response(
            {
                "status": "ok",
                "message": "Status webhook endpoint is ready",
                "provider": provider.lower(),
                "registered": get_registry().has(provider),
            }
        )

    def _signature_ok(self, request, provider: str) -> bool:
        if not getattr(settings, "WEBHOOK_REQUIRE_SIGNATURE", False):
            return True

        registry = get_registry()
        if not registry.has(provider):
            return True

        header = getattr(settings, "WEBHOOK_SIGNATURE_HEADER", "X-Statuspage-Signature")
        signature = request.headers.get(header)
        return registry.get(provider).validate_webhook_signature(request.body, signature)
