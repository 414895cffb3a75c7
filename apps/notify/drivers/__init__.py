"""
Notification drivers for sending notifications to various platforms.
"""

from django.conf import settings

from apps.notify.drivers.base import BaseNotifyDriver, NotificationMessage
from apps.notify.drivers.console import ConsoleNotifyDriver
from apps.notify.drivers.generic import GenericNotifyDriver
from apps.notify.drivers.slack import SlackNotifyDriver
from apps.notify.drivers.telegram import TelegramNotifyDriver

__all__ = [
    "NotificationMessage",
    "BaseNotifyDriver",
    "ConsoleNotifyDriver",
    "GenericNotifyDriver",
    "SlackNotifyDriver",
    "TelegramNotifyDriver",
    "DRIVER_REGISTRY",
    "get_driver",
    "is_notify_enabled",
]

# Registry of available notification drivers
DRIVER_REGISTRY: dict[str, type[BaseNotifyDriver]] = {
    "console": ConsoleNotifyDriver,
    "slack": SlackNotifyDriver,
    "telegram": TelegramNotifyDriver,
    "generic": GenericNotifyDriver,
}


def get_driver(name: str) -> BaseNotifyDriver:
    """
    Get a driver instance by name.

    Raises:
        ValueError: If driver name is not found.
    """
    if name not in DRIVER_REGISTRY:
        raise ValueError(
            f"Unknown notify driver: {name}. Available: {', '.join(DRIVER_REGISTRY.keys())}"
        )
    return DRIVER_REGISTRY[name]()


def is_notify_enabled(driver_name: str) -> bool:
    """
    Check if a notification driver is enabled.

    Disabled when:
    - NOTIFY_SKIP_ALL=True, or
    - driver_name is in NOTIFY_SKIP
    """
    if getattr(settings, "NOTIFY_SKIP_ALL", False):
        return False

    skip_list = getattr(settings, "NOTIFY_SKIP", [])
    return driver_name not in skip_list
