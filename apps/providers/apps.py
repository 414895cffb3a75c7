"""Django app configuration for the providers app."""

from django.apps import AppConfig


class ProvidersConfig(AppConfig):
    """Configuration for the status providers app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.providers"
    verbose_name = "Status Providers"

    def ready(self):
        from apps.providers import register_configured_providers

        register_configured_providers()
