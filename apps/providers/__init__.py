"""
Status providers: pluggable sources of incidents and component health.
"""

import logging
from typing import Any

from django.conf import settings

from apps.providers.base import BaseStatusProvider, SyncResult
from apps.providers.openai import OpenAIStatusProvider
from apps.providers.registry import ProviderRegistry, get_registry
from apps.providers.statuspage import GenericStatuspageProvider

__all__ = [
    "BaseStatusProvider",
    "SyncResult",
    "GenericStatuspageProvider",
    "OpenAIStatusProvider",
    "ProviderRegistry",
    "PROVIDER_CLASSES",
    "build_provider",
    "get_registry",
    "register_configured_providers",
]

logger = logging.getLogger(__name__)

# Provider implementations selectable from settings.STATUS_PROVIDERS["<name>"]["class"]
PROVIDER_CLASSES: dict[str, type[BaseStatusProvider]] = {
    "openai": OpenAIStatusProvider,
    "statuspage": GenericStatuspageProvider,
}


def build_provider(name: str, options: dict[str, Any] | None = None) -> BaseStatusProvider:
    """
    Instantiate a provider from a STATUS_PROVIDERS entry.

    Args:
        name: Registry name of the provider.
        options: Entry options; "class" selects the implementation
            (default "statuspage"), the rest are constructor arguments.

    Raises:
        ValueError: If the class key is unknown.
    """
    options = dict(options or {})
    class_key = options.pop("class", "statuspage")
    if class_key not in PROVIDER_CLASSES:
        raise ValueError(
            f"Unknown provider class: {class_key}. Available: {', '.join(PROVIDER_CLASSES)}"
        )
    provider_class = PROVIDER_CLASSES[class_key]
    if provider_class is OpenAIStatusProvider:
        return provider_class(**options)
    return provider_class(name=name, **options)


def register_configured_providers(registry: ProviderRegistry | None = None) -> ProviderRegistry:
    """Register every provider listed in settings.STATUS_PROVIDERS."""
    registry = registry or get_registry()

    for name, options in getattr(settings, "STATUS_PROVIDERS", {}).items():
        try:
            registry.register(name, build_provider(name, options))
        except (TypeError, ValueError) as e:
            logger.error("Could not register provider %s: %s", name, e)

    logger.info("Provider registry initialized with %d providers", registry.count())
    return registry
