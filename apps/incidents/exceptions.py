"""
Error taxonomy for status ingestion.

Only ``MalformedPayloadError`` is ever surfaced to a webhook caller; the rest
are handled where they occur and logged.
"""


class StatusTrackerError(Exception):
    """Base class for all status tracker errors."""


class MalformedPayloadError(StatusTrackerError, ValueError):
    """Webhook body could not be parsed at all. Rejected, not retryable."""


class UnrecognizedEventShape(StatusTrackerError):
    """Payload parsed but is neither an incident nor a component event."""


class ProviderUnavailableError(StatusTrackerError):
    """A provider's REST surface could not be reached or returned garbage."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"Provider {provider} unavailable: {reason}")


class PersistenceConflictError(StatusTrackerError):
    """A unique-constraint race could not be resolved within the retry budget."""


class NotificationDeliveryError(StatusTrackerError):
    """A notification channel failed to deliver a message."""

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"Delivery to {channel} failed: {reason}")


class ProviderNotFoundError(StatusTrackerError, LookupError):
    """Requested provider name is not registered."""


class InvalidProviderError(StatusTrackerError, ValueError):
    """Attempted to register a provider with an empty name or no implementation."""
